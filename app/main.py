import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from datetime import date

import streamlit as st
import pandas as pd
import plotly.express as px

from tracker.alerts import NEAR_LIMIT, OVER_BUDGET, alert_message
from tracker.config import CURRENCY_SYMBOL, RECENT_LIMIT
from tracker.domain import (
    CATEGORIES,
    EXPENSE,
    EXPENSE_CATEGORIES,
    INCOME,
    MONTHLY,
    PERIODS,
    BudgetDraft,
    TransactionDraft,
)
from tracker.errors import DuplicateCategoryError, PersistenceError, ValidationError
from tracker.logging_config import configure_logging
from tracker.services import FinanceTracker

st.set_page_config(page_title="Finance Tracker", layout="wide")


@st.cache_resource
def get_tracker() -> FinanceTracker:
    configure_logging()
    return FinanceTracker.open()


tracker = get_tracker()


def money(value: float) -> str:
    return f"{CURRENCY_SYMBOL}{value:,.2f}"


def tx_to_df(tx_list):
    rows = [
        {
            "Date": t.date,
            "Type": t.kind.title(),
            "Category": t.category,
            "Description": t.description,
            "Amount": t.amount if t.kind == INCOME else -t.amount,
            "Notes": t.notes or "",
        }
        for t in tx_list
    ]
    return pd.DataFrame(rows, columns=["Date", "Type", "Category", "Description", "Amount", "Notes"])


def transaction_form(key: str, current=None):
    """Render the add/edit form; returns a draft once submitted."""
    kinds = [EXPENSE, INCOME]
    kind = st.radio(
        "Type",
        kinds,
        index=kinds.index(current.kind) if current else 0,
        format_func=str.title,
        horizontal=True,
        key=f"{key}_kind",
    )
    options = list(CATEGORIES[kind])
    with st.form(key, clear_on_submit=current is None):
        col1, col2 = st.columns(2)
        with col1:
            amount = st.number_input(
                "Amount", min_value=0.0, step=10.0, format="%.2f",
                value=float(current.amount) if current else 0.0,
            )
            tx_date = st.date_input("Date", value=date.fromisoformat(current.date) if current else date.today())
        with col2:
            category = st.selectbox(
                "Category", options,
                index=options.index(current.category) if current and current.category in options else 0,
            )
            description = st.text_input("Description", value=current.description if current else "")
        notes = st.text_area("Notes (optional)", value=(current.notes or "") if current else "")
        if not st.form_submit_button("Save Transaction"):
            return None
    return TransactionDraft(
        kind=kind,
        amount=float(amount),
        category=category,
        description=description,
        date=tx_date.isoformat(),
        notes=notes or None,
    )


menu = st.sidebar.radio(
    "Menu",
    ["🏠 Dashboard", "➕ Add", "🧾 History", "💰 Budgets", "⚙️ More"]
)

if menu == "🏠 Dashboard":
    summary = tracker.dashboard()
    st.title("🏠 Dashboard")

    k1, k2, k3 = st.columns(3)
    with k1:
        st.metric("Total Balance", money(summary["balance"]))
    with k2:
        st.metric("Income", money(summary["total_income"]))
    with k3:
        st.metric("Expenses", money(summary["total_expenses"]))

    for status in summary["alerts"]:
        if status.status == OVER_BUDGET:
            st.error(f"🔴 {alert_message(status)}")
        else:
            st.warning(f"⚠️ {alert_message(status)}")

    st.subheader("📋 Recent Transactions")
    st.caption(f"Total: {summary['transaction_count']} transactions")
    recent_df = tx_to_df(summary["recent"])
    if not recent_df.empty:
        recent_df["Amount"] = recent_df["Amount"].map(money)
        st.table(recent_df.head(RECENT_LIMIT))
    else:
        st.info("No transactions yet. Add one from the menu.")

    breakdown = summary["spent_by_category"]
    if breakdown:
        df_cat = pd.DataFrame(
            sorted(breakdown.items(), key=lambda item: item[1], reverse=True),
            columns=["Category", "Total"],
        )
        fig_cat = px.pie(df_cat, values="Total", names="Category", title="Expenses by Category")
        fig_cat.update_layout(height=350)
        st.plotly_chart(fig_cat, use_container_width=True)

elif menu == "➕ Add":
    st.title("➕ Add Transaction")
    draft = transaction_form("add_form")
    if draft is not None:
        try:
            tracker.transactions.add(draft)
        except ValidationError as e:
            st.error(e.message)
        except PersistenceError as e:
            st.error(f"Could not save the transaction: {e}")
        else:
            st.success("✅ Transaction added successfully")

elif menu == "🧾 History":
    st.title("🧾 Transaction History")
    transactions = tracker.transactions.transactions
    income_count = len(tracker.transactions.by_kind(INCOME))
    expense_count = len(tracker.transactions.by_kind(EXPENSE))
    selected = st.radio(
        "Show",
        ["all", INCOME, EXPENSE],
        format_func=lambda k: {
            "all": f"All ({len(transactions)})",
            INCOME: f"Income ({income_count})",
            EXPENSE: f"Expenses ({expense_count})",
        }[k],
        horizontal=True,
    )
    shown = transactions if selected == "all" else tracker.transactions.by_kind(selected)

    if not shown:
        st.info("No transactions found")
    for t in sorted(shown, key=lambda t: t.date, reverse=True):
        sign = "+" if t.kind == INCOME else "-"
        with st.expander(f"{t.date} · {t.description} · {sign}{money(t.amount)}"):
            st.caption(f"{t.kind.title()} · {t.category}" + (f" · {t.notes}" if t.notes else ""))
            draft = transaction_form(f"edit_{t.id}", current=t)
            if draft is not None:
                try:
                    tracker.transactions.update(t.id, draft)
                except (ValidationError, PersistenceError) as e:
                    st.error(str(e))
                else:
                    st.success("Transaction updated successfully!")
                    st.rerun()
            if st.button("🗑 Delete", key=f"del_{t.id}"):
                tracker.transactions.delete(t.id)
                st.rerun()

    if transactions:
        st.download_button(
            "⬇ Download CSV",
            tx_to_df(transactions).to_csv(index=False),
            file_name="transactions.csv",
            mime="text/csv",
        )

elif menu == "💰 Budgets":
    st.title("💰 Budgets")

    with st.expander("➕ Add Budget"):
        with st.form("budget_form", clear_on_submit=True):
            category = st.selectbox("Category", list(EXPENSE_CATEGORIES))
            amount = st.number_input("Budget Amount", min_value=0.0, step=100.0, format="%.2f")
            period = st.radio("Period", list(PERIODS), index=PERIODS.index(MONTHLY), format_func=str.title, horizontal=True)
            if st.form_submit_button("Add Budget"):
                try:
                    tracker.budgets.add(BudgetDraft(category=category, amount=float(amount), period=period))
                except DuplicateCategoryError as e:
                    st.error(str(e))
                except ValidationError as e:
                    st.error(e.message)
                else:
                    st.success("Budget added successfully!")

    statuses = tracker.dashboard()["budget_statuses"]
    if not statuses:
        st.info("No budgets set. Add one to start tracking your spending.")
    for status in statuses:
        b = status.budget
        st.metric(
            f"{b.category} ({b.period.title()})",
            f"{money(b.spent)} / {money(b.amount)}",
            f"{money(status.remaining)} remaining",
        )
        st.progress(min(status.percent, 100.0) / 100)
        if status.status == OVER_BUDGET:
            st.error(f"Over budget by {money(status.overage)}")
        elif status.status == NEAR_LIMIT:
            st.warning(f"{status.percent:.0f}% used, approaching the limit")
        if st.button("🗑 Delete Budget", key=f"del_budget_{b.id}"):
            tracker.budgets.delete(b.id)
            st.rerun()

elif menu == "⚙️ More":
    st.title("⚙️ More")
    st.warning("Clearing removes every transaction and budget. This cannot be undone.")
    confirm = st.checkbox("I understand, delete all my data")
    if st.button("Clear All Data", disabled=not confirm):
        tracker.clear_all()
        st.success("All data cleared.")
