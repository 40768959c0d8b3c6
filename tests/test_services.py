from datetime import date

from tracker.alerts import NEAR_LIMIT, OVER_BUDGET
from tracker.domain import BudgetDraft, TransactionDraft
from tracker.events import BUDGET_ALERT
from tracker.services import FinanceTracker, SummaryService, default_calculators, totals_calculator
from tracker.storage import MemoryStorage

TODAY = date(2025, 1, 15)


def make_tracker(storage=None):
    return FinanceTracker(storage if storage is not None else MemoryStorage(), clock=lambda: TODAY)


def expense(amount, category="Food", day="2025-01-15", description="Lunch"):
    return TransactionDraft("expense", amount, category, description, day)


def test_summary_service_runs_calculators_in_order():
    def count_calc(transactions, budgets, acc):
        return {"count": len(transactions)}

    def doubled_calc(transactions, budgets, acc):
        return {"doubled": acc["count"] * 2}

    svc = SummaryService(calculators=[count_calc, doubled_calc])
    rpt = svc.report(("a", "b", "c"), ())
    assert [s["calculator"] for s in rpt["steps"]] == ["count_calc", "doubled_calc"]
    assert rpt["steps"][0]["output"] == {"count": 3}
    assert rpt["result"] == {"count": 3, "doubled": 6}


def test_totals_calculator_on_empty_data():
    assert totals_calculator((), (), {}) == {
        "total_income": 0.0,
        "total_expenses": 0.0,
        "balance": 0.0,
        "transaction_count": 0,
    }


def test_dashboard_figures():
    tracker = make_tracker()
    tracker.transactions.add(expense(100.0, day="2025-01-10"))
    tracker.transactions.add(TransactionDraft("income", 500.0, "Salary", "Pay", "2025-01-01"))
    tracker.transactions.add(expense(40.0, category="Travel", day="2025-01-12", description="Taxi"))

    summary = tracker.dashboard()
    assert summary["total_income"] == 500.0
    assert summary["total_expenses"] == 140.0
    assert summary["balance"] == 360.0
    assert summary["transaction_count"] == 3
    assert [t.description for t in summary["recent"]] == ["Taxi", "Lunch", "Pay"]
    assert summary["spent_by_category"] == {"Food": 100.0, "Travel": 40.0}
    assert summary["budget_statuses"] == ()
    assert summary["alerts"] == ()


def test_recent_limit_is_configurable():
    tracker = FinanceTracker(MemoryStorage(), summary=SummaryService(default_calculators(recent_limit=1)))
    tracker.transactions.add(expense(1.0, day="2025-01-01", description="old"))
    tracker.transactions.add(expense(1.0, day="2025-01-02", description="new"))
    assert [t.description for t in tracker.dashboard()["recent"]] == ["new"]


def test_alerts_published_after_transaction_changes():
    tracker = make_tracker()
    published = []
    tracker.bus.subscribe(BUDGET_ALERT, lambda e, p: published.append(p))

    tracker.budgets.add(BudgetDraft("Food", 400.0, "monthly"))
    tracker.budgets.add(BudgetDraft("Bills", 800.0, "monthly"))
    assert published == []

    tracker.transactions.add(expense(500.0))
    assert [(p["category"], p["status"], p["overage"]) for p in published] == [("Food", OVER_BUDGET, 100.0)]

    published.clear()
    tracker.transactions.add(expense(680.0, category="Bills", description="Rent"))
    assert {p["category"]: p["status"] for p in published} == {"Food": OVER_BUDGET, "Bills": NEAR_LIMIT}
    assert [s.budget.category for s in tracker.alerts] == ["Food", "Bills"]


def test_clear_all_resets_both_collections():
    storage = MemoryStorage()
    tracker = make_tracker(storage)
    tracker.transactions.add(expense(100.0))
    tracker.budgets.add(BudgetDraft("Food", 50.0, "weekly"))

    tracker.clear_all()

    assert tracker.transactions.transactions == ()
    assert tracker.budgets.budgets == ()
    assert storage.blobs == {}

    tracker.transactions.add(expense(10.0))
    assert tracker.dashboard()["total_expenses"] == 10.0


def test_open_persists_between_sessions(tmp_path):
    tracker = FinanceTracker.open(tmp_path, clock=lambda: TODAY)
    tracker.transactions.add(expense(300.0))
    budget = tracker.budgets.add(BudgetDraft("Food", 1000.0, "monthly"))

    reopened = FinanceTracker.open(tmp_path, clock=lambda: TODAY)
    assert reopened.transactions.transactions == tracker.transactions.transactions
    assert reopened.budgets.budgets == (budget,)
    assert reopened.budgets.budgets[0].spent == 300.0


def test_open_recomputes_spent_for_a_later_day(tmp_path):
    tracker = FinanceTracker.open(tmp_path, clock=lambda: TODAY)
    tracker.budgets.add(BudgetDraft("Food", 100.0, "weekly"))
    tracker.transactions.add(expense(90.0, day="2025-01-14"))
    assert tracker.budgets.budgets[0].spent == 90.0

    week_later = FinanceTracker.open(tmp_path, clock=lambda: date(2025, 1, 25))
    assert week_later.budgets.budgets[0].spent == 0.0
    assert week_later.alerts == ()


def test_dashboard_and_alerts_follow_the_clock():
    now = [TODAY]
    tracker = FinanceTracker(MemoryStorage(), clock=lambda: now[0])
    tracker.budgets.add(BudgetDraft("Food", 100.0, "weekly"))
    tracker.transactions.add(expense(90.0, day="2025-01-14"))
    assert [s.status for s in tracker.alerts] == [NEAR_LIMIT]

    now[0] = date(2025, 1, 30)

    assert tracker.alerts == ()
    assert [s.budget.spent for s in tracker.dashboard()["budget_statuses"]] == [0.0]
