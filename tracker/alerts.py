from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from tracker.config import NEAR_LIMIT_PERCENT
from tracker.domain import Budget

NORMAL = "normal"
NEAR_LIMIT = "near_limit"
OVER_BUDGET = "over_budget"


@dataclass(frozen=True)
class BudgetStatus:
    budget: Budget
    percent: float
    status: str
    overage: float = 0.0

    @property
    def remaining(self) -> float:
        return self.budget.amount - self.budget.spent

    @property
    def is_alert(self) -> bool:
        return self.status != NORMAL


def utilization(b: Budget) -> float:
    return b.spent / b.amount * 100


def classify_budget(b: Budget, near_limit: float = NEAR_LIMIT_PERCENT) -> Optional[BudgetStatus]:
    # a ceiling of zero or less has no meaningful percentage
    if b.amount <= 0:
        return None

    percent = utilization(b)
    if percent > 100:
        return BudgetStatus(b, percent, OVER_BUDGET, overage=b.spent - b.amount)
    if percent >= near_limit:
        return BudgetStatus(b, percent, NEAR_LIMIT)
    return BudgetStatus(b, percent, NORMAL)


def budget_statuses(budgets: Iterable[Budget]) -> Tuple[BudgetStatus, ...]:
    statuses = (classify_budget(b) for b in budgets)
    return tuple(s for s in statuses if s is not None)


def budget_alerts(budgets: Iterable[Budget]) -> Tuple[BudgetStatus, ...]:
    return tuple(s for s in budget_statuses(budgets) if s.is_alert)


def alert_message(s: BudgetStatus) -> str:
    b = s.budget
    if s.status == OVER_BUDGET:
        return f"Over budget for {b.category}: {b.spent:,.2f} / {b.amount:,.2f} ({s.overage:,.2f} over)"
    if s.status == NEAR_LIMIT:
        return f"Approaching the {b.category} limit: {s.percent:.0f}% of {b.amount:,.2f} used"
    return f"{b.category}: {s.percent:.0f}% used"
