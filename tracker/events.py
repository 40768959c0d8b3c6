import logging
from datetime import datetime
from typing import Callable, Dict, List, NamedTuple, Optional

__all__ = [
    'EventBus', 'Event', 'Handler',
    'TRANSACTIONS_CHANGED', 'BUDGETS_CHANGED', 'BUDGET_ALERT',
]

logger = logging.getLogger(__name__)

TRANSACTIONS_CHANGED = "TRANSACTIONS_CHANGED"
BUDGETS_CHANGED = "BUDGETS_CHANGED"
BUDGET_ALERT = "BUDGET_ALERT"


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


Handler = Callable[[Event, dict], Optional[dict]]


class EventBus:
    """Synchronous in-process publish/subscribe.

    Handlers run in subscription order on the publisher's call stack, so a
    handler's exception propagates to whoever published the event.
    """

    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def unsubscribe(self, name: str, handler: Handler) -> None:
        handlers = self._subscribers.get(name, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, name: str, payload: dict) -> List[Optional[dict]]:
        handlers = list(self._subscribers.get(name, ()))
        if not handlers:
            return []

        event = Event(name=name, ts=datetime.now().isoformat(), payload=payload)
        logger.debug("publishing %s to %d handler(s)", name, len(handlers))
        return [handler(event, payload) for handler in handlers]
