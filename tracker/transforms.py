from collections import defaultdict
from functools import reduce
from typing import Dict, Iterable, Iterator, Tuple

from tracker.domain import EXPENSE, INCOME, Budget, Transaction
from tracker.filters import by_date_range, by_kind


def add_transaction(
    trans: Tuple[Transaction, ...], t: Transaction
) -> Tuple[Transaction, ...]:
    return trans + (t,)


def replace_transaction(
    trans: Tuple[Transaction, ...], t: Transaction
) -> Tuple[Transaction, ...]:
    return tuple(t if old.id == t.id else old for old in trans)


def remove_transaction(
    trans: Tuple[Transaction, ...], tid: str
) -> Tuple[Transaction, ...]:
    return tuple(t for t in trans if t.id != tid)


def add_budget(budgets: Tuple[Budget, ...], b: Budget) -> Tuple[Budget, ...]:
    return budgets + (b,)


def replace_budget(budgets: Tuple[Budget, ...], b: Budget) -> Tuple[Budget, ...]:
    return tuple(b if old.id == b.id else old for old in budgets)


def remove_budget(budgets: Tuple[Budget, ...], bid: str) -> Tuple[Budget, ...]:
    return tuple(b for b in budgets if b.id != bid)


def total_by_kind(trans: Iterable[Transaction], kind: str) -> float:
    return reduce(lambda acc, t: acc + t.amount, filter(by_kind(kind), trans), 0.0)


def total_income(trans: Iterable[Transaction]) -> float:
    return total_by_kind(trans, INCOME)


def total_expenses(trans: Iterable[Transaction]) -> float:
    return total_by_kind(trans, EXPENSE)


def balance(trans: Tuple[Transaction, ...]) -> float:
    return total_income(trans) - total_expenses(trans)


def filter_by_kind(trans: Iterable[Transaction], kind: str) -> Tuple[Transaction, ...]:
    return tuple(filter(by_kind(kind), trans))


def list_by_date_range(
    trans: Iterable[Transaction], start: str, end: str
) -> Tuple[Transaction, ...]:
    return tuple(filter(by_date_range(start, end), trans))


def recent(trans: Iterable[Transaction], n: int) -> Tuple[Transaction, ...]:
    """Return the ``n`` newest transactions, newest date first.

    Transactions sharing a date keep a deterministic order: the one
    inserted later comes first.
    """
    if n <= 0:
        return ()
    ordered = sorted(
        enumerate(trans),
        key=lambda pair: (pair[1].date, pair[0]),
        reverse=True,
    )
    return tuple(t for _, t in ordered[:n])


def spent_by_category(trans: Iterable[Transaction]) -> Dict[str, float]:
    totals: Dict[str, float] = defaultdict(float)
    for t in filter(by_kind(EXPENSE), trans):
        totals[t.category] += t.amount
    return dict(totals)


def top_expense_categories(
    trans: Iterable[Transaction], k: int
) -> Iterator[Tuple[str, float]]:
    ordered = sorted(
        spent_by_category(trans).items(),
        key=lambda item: item[1],
        reverse=True,
    )

    for name, total in ordered[: max(0, k)]:
        yield name, total
