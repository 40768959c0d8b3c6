from dataclasses import dataclass
from typing import Optional

INCOME = "income"
EXPENSE = "expense"
KINDS = (INCOME, EXPENSE)

WEEKLY = "weekly"
MONTHLY = "monthly"
PERIODS = (WEEKLY, MONTHLY)

EXPENSE_CATEGORIES = ("Food", "Travel", "Bills", "Shopping", "Entertainment", "Health", "Other")
INCOME_CATEGORIES = ("Salary", "Business", "Investment", "Freelance", "Other")

CATEGORIES = {
    EXPENSE: EXPENSE_CATEGORIES,
    INCOME: INCOME_CATEGORIES,
}


@dataclass(frozen=True)
class TransactionDraft:
    kind: str         # "income" or "expense"
    amount: float     # always positive, kind carries the sign
    category: str
    description: str
    date: str         # "YYYY-MM-DD"
    notes: Optional[str] = None


@dataclass(frozen=True)
class Transaction:
    id: str
    kind: str
    amount: float
    category: str
    description: str
    date: str
    notes: Optional[str] = None

    @classmethod
    def from_draft(cls, tid: str, draft: TransactionDraft) -> "Transaction":
        return cls(
            id=tid,
            kind=draft.kind,
            amount=float(draft.amount),
            category=draft.category,
            description=draft.description,
            date=draft.date,
            notes=draft.notes,
        )


@dataclass(frozen=True)
class BudgetDraft:
    category: str
    amount: float
    period: str  # "weekly" or "monthly"


# A spending ceiling for one category; spent is derived, never user-set
@dataclass(frozen=True)
class Budget:
    id: str
    category: str
    amount: float
    period: str
    spent: float = 0.0
