from datetime import date, datetime

import pytest

from tracker.budgets import compute_spent, refresh_spent, window_start
from tracker.domain import Budget, Transaction

TODAY = date(2025, 1, 15)


def make_tx(id, kind, amount, category, day):
    return Transaction(id=id, kind=kind, amount=amount, category=category, description=id, date=day)


def make_sample():
    return (
        make_tx("t1", "expense", 100.0, "Food", "2025-01-15"),
        make_tx("t2", "expense", 50.0, "Food", "2025-01-08"),   # first day of the weekly window
        make_tx("t3", "expense", 25.0, "Food", "2025-01-07"),   # just outside it
        make_tx("t4", "expense", 400.0, "Food", "2024-12-15"),  # first day of the monthly window
        make_tx("t5", "expense", 800.0, "Food", "2024-12-14"),
        make_tx("t6", "expense", 60.0, "Travel", "2025-01-14"),
        make_tx("t7", "income", 900.0, "Other", "2025-01-14"),
        make_tx("t8", "expense", 5.0, "Other", "2025-01-14"),
    )


def test_weekly_window_start():
    assert window_start("weekly", TODAY) == date(2025, 1, 8)
    assert window_start("weekly", date(2025, 3, 3)) == date(2025, 2, 24)


def test_monthly_window_start_is_one_calendar_month_back():
    assert window_start("monthly", TODAY) == date(2024, 12, 15)
    assert window_start("monthly", date(2025, 3, 15)) == date(2025, 2, 15)


def test_monthly_window_clamps_to_shorter_month():
    assert window_start("monthly", date(2025, 3, 31)) == date(2025, 2, 28)
    assert window_start("monthly", date(2024, 3, 31)) == date(2024, 2, 29)
    assert window_start("monthly", date(2025, 5, 31)) == date(2025, 4, 30)


def test_window_ignores_time_of_day():
    assert window_start("weekly", datetime(2025, 1, 15, 23, 59)) == date(2025, 1, 8)
    assert window_start("monthly", datetime(2025, 1, 15, 0, 1)) == date(2024, 12, 15)


def test_unknown_period():
    with pytest.raises(ValueError):
        window_start("yearly", TODAY)


def test_compute_spent_weekly():
    assert compute_spent(make_sample(), "Food", "weekly", TODAY) == 150.0


def test_compute_spent_monthly():
    assert compute_spent(make_sample(), "Food", "monthly", TODAY) == 575.0


def test_compute_spent_counts_only_expenses_of_that_category():
    trans = make_sample()
    assert compute_spent(trans, "Travel", "weekly", TODAY) == 60.0
    assert compute_spent(trans, "Other", "weekly", TODAY) == 5.0
    assert compute_spent(trans, "Health", "monthly", TODAY) == 0
    assert compute_spent((), "Food", "monthly", TODAY) == 0


def test_compute_spent_is_pure():
    trans = make_sample()
    before = tuple(trans)
    first = compute_spent(trans, "Food", "monthly", TODAY)
    second = compute_spent(trans, "Food", "monthly", TODAY)
    assert first == second
    assert trans == before


def test_compute_spent_moves_with_now():
    trans = make_sample()
    assert compute_spent(trans, "Food", "weekly", date(2025, 1, 30)) == 0
    # no upper bound: later-dated expenses still count
    assert compute_spent(trans, "Food", "weekly", date(2025, 1, 14)) == 175.0


def test_refresh_spent_overwrites_stale_values():
    budgets = (
        Budget("b1", "Food", 1000.0, "monthly", spent=9999.0),
        Budget("b2", "Travel", 100.0, "weekly", spent=0.0),
    )
    refreshed = refresh_spent(budgets, make_sample(), TODAY)
    assert [b.spent for b in refreshed] == [575.0, 60.0]
    assert [b.id for b in refreshed] == ["b1", "b2"]
    assert budgets[0].spent == 9999.0
    assert refresh_spent((), make_sample(), TODAY) == ()
