import logging
from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Sequence, Tuple

from tracker.alerts import alert_message, budget_alerts, budget_statuses
from tracker.budgets import Moment
from tracker.config import BUDGETS_KEY, RECENT_LIMIT, TRANSACTIONS_KEY, ensure_data_directory
from tracker.domain import Budget, Transaction
from tracker.events import BUDGET_ALERT, BUDGETS_CHANGED, Event, EventBus
from tracker.storage import JsonFileStorage, Storage
from tracker.stores import BudgetStore, TransactionStore
from tracker.transforms import recent, spent_by_category, total_expenses, total_income

logger = logging.getLogger(__name__)

Calculator = Callable[[Tuple[Transaction, ...], Tuple[Budget, ...], Dict[str, Any]], Dict[str, Any]]


def totals_calculator(transactions, budgets, acc):
    income = total_income(transactions)
    expenses = total_expenses(transactions)
    return {
        "total_income": income,
        "total_expenses": expenses,
        "balance": income - expenses,
        "transaction_count": len(transactions),
    }


def recent_calculator(n: int = RECENT_LIMIT) -> Calculator:
    def recent_transactions(transactions, budgets, acc):
        return {"recent": recent(transactions, n)}

    return recent_transactions


def breakdown_calculator(transactions, budgets, acc):
    return {"spent_by_category": spent_by_category(transactions)}


def budgets_calculator(transactions, budgets, acc):
    return {
        "budget_statuses": budget_statuses(budgets),
        "alerts": budget_alerts(budgets),
    }


def default_calculators(recent_limit: int = RECENT_LIMIT) -> Tuple[Calculator, ...]:
    return (
        totals_calculator,
        recent_calculator(recent_limit),
        breakdown_calculator,
        budgets_calculator,
    )


class SummaryService:
    """Facade building the dashboard summary from injected calculators.

    calculators: sequence of functions taking (transactions, budgets, acc) -> dict (partial results).
    Each calculator sees the merged output of the ones before it in ``acc``.
    """

    def __init__(self, calculators: Sequence[Calculator]):
        self.calculators = calculators

    def report(self, transactions: Tuple[Transaction, ...], budgets: Tuple[Budget, ...]) -> Dict[str, Any]:
        """Run calculators in order and return the merged result with intermediate steps."""
        report = {"steps": [], "result": {}}

        acc: Dict[str, Any] = {}
        for calc in self.calculators:
            out = calc(transactions, budgets, acc)
            report["steps"].append({"calculator": getattr(calc, "__name__", str(calc)), "output": out})
            if isinstance(out, dict):
                acc.update(out)

        report["result"] = acc
        return report


class FinanceTracker:
    """Wires storage, the event bus and both stores into one application object."""

    def __init__(
        self,
        storage: Storage,
        clock: Callable[[], Moment] = date.today,
        bus: Optional[EventBus] = None,
        summary: Optional[SummaryService] = None,
    ):
        self.storage = storage
        self.bus = bus if bus is not None else EventBus()
        self.transactions = TransactionStore(storage, self.bus)
        self.budgets = BudgetStore(storage, self.transactions, clock=clock)
        self.summary = summary or SummaryService(default_calculators())
        self.bus.subscribe(BUDGETS_CHANGED, self._on_budgets_changed)

    @classmethod
    def open(cls, data_dir: Optional[Path] = None, **kwargs) -> "FinanceTracker":
        storage = JsonFileStorage(data_dir if data_dir is not None else ensure_data_directory())
        tracker = cls(storage, **kwargs)
        tracker.load()
        return tracker

    def load(self) -> None:
        # budgets first: loading transactions then refreshes their spent
        self.budgets.load()
        self.transactions.load()

    def clear_all(self) -> None:
        """Erase both stored collections and start over from empty ones."""
        self.storage.remove(TRANSACTIONS_KEY)
        self.storage.remove(BUDGETS_KEY)
        logger.info("cleared all stored data")
        self.load()

    @property
    def alerts(self):
        return budget_alerts(self.budgets.budgets)

    def dashboard(self) -> Dict[str, Any]:
        return self.summary.report(self.transactions.transactions, self.budgets.budgets)["result"]

    def _on_budgets_changed(self, event: Event, payload: dict) -> dict:
        alerts = budget_alerts(payload["budgets"])
        for status in alerts:
            logger.warning(alert_message(status))
            self.bus.publish(BUDGET_ALERT, {
                "budget_id": status.budget.id,
                "category": status.budget.category,
                "status": status.status,
                "percent": status.percent,
                "overage": status.overage,
            })
        return {"alerts": len(alerts)}
