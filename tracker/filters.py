from typing import Callable

from tracker.domain import Transaction

Predicate = Callable[[Transaction], bool]


def by_category(category: str) -> Predicate:
    def _filter(t: Transaction) -> bool:
        return t.category == category

    return _filter


def by_kind(kind: str) -> Predicate:
    def _filter(t: Transaction) -> bool:
        return t.kind == kind

    return _filter


# "YYYY-MM-DD" strings order the same way as the dates they spell
def by_date_range(start: str, end: str) -> Predicate:
    def _filter(t: Transaction) -> bool:
        return start <= t.date <= end

    return _filter


def on_or_after(start: str) -> Predicate:
    def _filter(t: Transaction) -> bool:
        return t.date >= start

    return _filter


def all_of(*preds: Predicate) -> Predicate:
    def _filter(t: Transaction) -> bool:
        return all(p(t) for p in preds)

    return _filter
