"""Transaction and budget stores.

Both stores treat every mutation as a whole-collection replace: compute the
new tuple, persist it, and only then swap it in and notify subscribers. A
failed write leaves the in-memory collection exactly as it was.

The budget store listens for ``TRANSACTIONS_CHANGED`` on the transaction
store's bus and recomputes every budget's ``spent`` from the snapshot carried
in the event payload.
"""

import logging
from datetime import date
from typing import Callable, Optional, Tuple
from uuid import uuid4

from tracker.budgets import Moment, compute_spent, refresh_spent
from tracker.config import BUDGETS_KEY, TRANSACTIONS_KEY
from tracker.domain import Budget, BudgetDraft, Transaction, TransactionDraft
from tracker.errors import (
    DuplicateCategoryError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from tracker.events import BUDGETS_CHANGED, TRANSACTIONS_CHANGED, Event, EventBus
from tracker.functional import (
    Either,
    Maybe,
    find_first,
    safe_budget,
    safe_transaction,
    validate_budget,
    validate_transaction,
)
from tracker.storage import (
    Storage,
    dump_budgets,
    dump_transactions,
    load_budgets,
    load_transactions,
)
from tracker.transforms import (
    add_budget,
    add_transaction,
    filter_by_kind,
    list_by_date_range,
    remove_budget,
    remove_transaction,
    replace_budget,
    replace_transaction,
    total_by_kind,
)

logger = logging.getLogger(__name__)


def new_id() -> str:
    return uuid4().hex


def _require(result: Either):
    if result.is_left():
        raise ValidationError.from_details(result.get_error())
    return result.get_or_else(None)


def _write(storage: Storage, key: str, text: str) -> None:
    try:
        storage.write(key, text)
    except OSError as e:
        raise PersistenceError(f"Failed to save {key}: {e}") from e


class TransactionStore:
    def __init__(
        self,
        storage: Storage,
        bus: Optional[EventBus] = None,
        key: str = TRANSACTIONS_KEY,
        id_factory: Callable[[], str] = new_id,
    ):
        self._storage = storage
        self._bus = bus if bus is not None else EventBus()
        self._key = key
        self._new_id = id_factory
        self._transactions: Tuple[Transaction, ...] = ()

    @property
    def bus(self) -> EventBus:
        return self._bus

    @property
    def transactions(self) -> Tuple[Transaction, ...]:
        return self._transactions

    def load(self) -> Tuple[Transaction, ...]:
        self._transactions = load_transactions(self._storage.read(self._key))
        logger.debug("loaded %d transaction(s)", len(self._transactions))
        self._bus.publish(TRANSACTIONS_CHANGED, {"action": "load", "transactions": self._transactions})
        return self._transactions

    def _commit(self, updated: Tuple[Transaction, ...], action: str, tid: str) -> None:
        _write(self._storage, self._key, dump_transactions(updated))
        self._transactions = updated
        logger.debug("%s transaction %s, %d stored", action, tid, len(updated))
        self._bus.publish(TRANSACTIONS_CHANGED, {"action": action, "id": tid, "transactions": updated})

    def add(self, draft: TransactionDraft) -> Transaction:
        _require(validate_transaction(draft))
        t = Transaction.from_draft(self._new_id(), draft)
        self._commit(add_transaction(self._transactions, t), "add", t.id)
        return t

    def update(self, tid: str, draft: TransactionDraft) -> Transaction:
        _require(validate_transaction(draft))
        if self.get(tid).is_none():
            raise NotFoundError("Transaction", tid)
        t = Transaction.from_draft(tid, draft)
        self._commit(replace_transaction(self._transactions, t), "update", tid)
        return t

    def delete(self, tid: str) -> bool:
        """Remove a transaction; returns False when ``tid`` is unknown."""
        if self.get(tid).is_none():
            return False
        self._commit(remove_transaction(self._transactions, tid), "delete", tid)
        return True

    def get(self, tid: str) -> Maybe[Transaction]:
        return safe_transaction(self._transactions, tid)

    def list_by_date_range(self, start: str, end: str) -> Tuple[Transaction, ...]:
        return list_by_date_range(self._transactions, start, end)

    def total_by_kind(self, kind: str) -> float:
        return total_by_kind(self._transactions, kind)

    def by_kind(self, kind: str) -> Tuple[Transaction, ...]:
        return filter_by_kind(self._transactions, kind)


class BudgetStore:
    def __init__(
        self,
        storage: Storage,
        transaction_store: TransactionStore,
        key: str = BUDGETS_KEY,
        clock: Callable[[], Moment] = date.today,
        id_factory: Callable[[], str] = new_id,
    ):
        self._storage = storage
        self._transaction_store = transaction_store
        self._bus = transaction_store.bus
        self._key = key
        self._clock = clock
        self._new_id = id_factory
        self._budgets: Tuple[Budget, ...] = ()
        self._bus.subscribe(TRANSACTIONS_CHANGED, self._on_transactions_changed)

    @property
    def bus(self) -> EventBus:
        return self._bus

    @property
    def budgets(self) -> Tuple[Budget, ...]:
        """Budgets with spent evaluated against the current transactions and clock."""
        return refresh_spent(self._budgets, self._transaction_store.transactions, self._clock())

    def load(self) -> Tuple[Budget, ...]:
        # stored spent values are never trusted
        stored = load_budgets(self._storage.read(self._key))
        self._budgets = refresh_spent(stored, self._transaction_store.transactions, self._clock())
        logger.debug("loaded %d budget(s)", len(self._budgets))
        self._bus.publish(BUDGETS_CHANGED, {"action": "load", "budgets": self._budgets})
        return self._budgets

    def _commit(self, updated: Tuple[Budget, ...], action: str, bid: Optional[str] = None) -> None:
        _write(self._storage, self._key, dump_budgets(updated))
        self._budgets = updated
        logger.debug("%s budget %s, %d stored", action, bid or "*", len(updated))
        self._bus.publish(BUDGETS_CHANGED, {"action": action, "id": bid, "budgets": updated})

    def calculate_spent(self, category: str, period: str) -> float:
        return compute_spent(self._transaction_store.transactions, category, period, self._clock())

    def _check_category_free(self, category: str, bid: Optional[str] = None) -> None:
        existing = self.by_category(category)
        if existing.map(lambda b: b.id != bid).get_or_else(False):
            raise DuplicateCategoryError(category)

    def add(self, draft: BudgetDraft) -> Budget:
        _require(validate_budget(draft))
        self._check_category_free(draft.category)
        b = Budget(
            id=self._new_id(),
            category=draft.category,
            amount=float(draft.amount),
            period=draft.period,
            spent=self.calculate_spent(draft.category, draft.period),
        )
        self._commit(add_budget(self._budgets, b), "add", b.id)
        return b

    def update(self, bid: str, draft: BudgetDraft) -> Budget:
        _require(validate_budget(draft))
        if self.get(bid).is_none():
            raise NotFoundError("Budget", bid)
        self._check_category_free(draft.category, bid)
        b = Budget(
            id=bid,
            category=draft.category,
            amount=float(draft.amount),
            period=draft.period,
            spent=self.calculate_spent(draft.category, draft.period),
        )
        self._commit(replace_budget(self._budgets, b), "update", bid)
        return b

    def delete(self, bid: str) -> bool:
        """Remove a budget; returns False when ``bid`` is unknown."""
        if self.get(bid).is_none():
            return False
        self._commit(remove_budget(self._budgets, bid), "delete", bid)
        return True

    def get(self, bid: str) -> Maybe[Budget]:
        return find_first(self.budgets, lambda b: b.id == bid)

    def by_category(self, category: str) -> Maybe[Budget]:
        return safe_budget(self.budgets, category)

    def recompute_all(self, transactions: Tuple[Transaction, ...]) -> Tuple[Budget, ...]:
        """Recompute every budget's ``spent`` from ``transactions`` and persist."""
        if not self._budgets:
            return self._budgets
        self._commit(refresh_spent(self._budgets, tuple(transactions), self._clock()), "recompute")
        return self._budgets

    def _on_transactions_changed(self, event: Event, payload: dict) -> dict:
        budgets = self.recompute_all(payload["transactions"])
        return {"budgets_refreshed": len(budgets)}
