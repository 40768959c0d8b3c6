"""Derivation of a budget's ``spent`` figure.

``spent`` is a pure function of the transaction snapshot, the budget's
category and period, and the moment it is evaluated at. Nothing here reads
or writes a store; callers hand in the snapshot and ``now`` explicitly.
"""

from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Iterable, Tuple, Union

import pandas as pd

from tracker.domain import EXPENSE, MONTHLY, WEEKLY, Budget, Transaction
from tracker.filters import all_of, by_category, by_kind, on_or_after

Moment = Union[date, datetime]

WEEK = timedelta(days=7)
MONTH = pd.DateOffset(months=1)


def _as_date(now: Moment) -> date:
    if isinstance(now, datetime):
        return now.date()
    return now


def window_start(period: str, now: Moment) -> date:
    """First day (inclusive) of the trailing window for ``period``.

    Weekly windows reach back seven days. Monthly windows reach back one
    calendar month; when the day does not exist in the earlier month it is
    clamped to that month's last day (2025-03-31 -> 2025-02-28).
    """
    today = _as_date(now)
    if period == WEEKLY:
        return today - WEEK
    if period == MONTHLY:
        return (pd.Timestamp(today) - MONTH).date()
    raise ValueError(f"Unknown budget period: {period!r}")


def compute_spent(
    trans: Iterable[Transaction], category: str, period: str, now: Moment
) -> float:
    start = window_start(period, now).isoformat()
    in_window = all_of(by_kind(EXPENSE), by_category(category), on_or_after(start))
    return sum((t.amount for t in trans if in_window(t)), 0.0)


def with_spent(b: Budget, trans: Iterable[Transaction], now: Moment) -> Budget:
    return replace(b, spent=compute_spent(trans, b.category, b.period, now))


def refresh_spent(
    budgets: Tuple[Budget, ...], trans: Tuple[Transaction, ...], now: Moment
) -> Tuple[Budget, ...]:
    return tuple(with_spent(b, trans, now) for b in budgets)
