import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import asyncio
from datetime import date

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from smartbudget.assistant import get_assistant
from smartbudget.budgets import BUDGET_CATEGORIES, CRITICAL, WARNING, status_level
from smartbudget.config import settings
from smartbudget.domain import CATEGORIES, EXPENSE, INCOME, as_plain
from smartbudget.events import GOALS_CHANGED, TRANSACTIONS_CHANGED, EventBus, register_default_handlers
from smartbudget.logging import setup_logging
from smartbudget.prompts import GREETING, SUGGESTED_QUESTIONS
from smartbudget.services import DashboardService
from smartbudget.storage import JsonFileStore, load_goals, load_transactions
from smartbudget.transforms import (
    add_transaction,
    default_category,
    delete_transaction,
    goals_from_form,
    recent_transactions,
    search_transactions,
    update_transaction,
    validate_transaction,
)

st.set_page_config(page_title=settings.app_name, layout="wide")

LEVEL_STYLE = {CRITICAL: "red", WARNING: "orange"}


if "store" not in st.session_state:
    setup_logging()
    store = JsonFileStore(settings.data_dir)
    st.session_state.store = store
    st.session_state.bus = register_default_handlers(EventBus(), store)
    st.session_state.transactions = load_transactions(store)
    st.session_state.goals = load_goals(store)
    st.session_state.messages = [{"role": "model", "text": GREETING}]
    st.session_state.editing_id = None
    st.session_state.deleting_id = None

bus: EventBus = st.session_state.bus


def commit_transactions(trans):
    previous = st.session_state.transactions
    st.session_state.transactions = trans
    results = bus.publish(TRANSACTIONS_CHANGED, {
        "previous_transactions": previous,
        "transactions": trans,
        "goals": st.session_state.goals,
        "today": date.today(),
    })
    for res in results:
        for alert in res.get("alerts", []):
            st.toast(alert, icon="⚠️")
        if "error" in res:
            st.error(f"Could not save changes: {res['error']}")


def commit_goals(goals):
    st.session_state.goals = goals
    for res in bus.publish(GOALS_CHANGED, {"goals": goals}):
        if "error" in res:
            st.error(f"Could not save budgets: {res['error']}")


def money(value) -> str:
    return f"${float(value):,.2f}"


def signed(t) -> str:
    return ("+" if t.type == INCOME else "-") + money(t.amount)


def transaction_form(key: str, initial=None, default_type: str = EXPENSE):
    kind = initial.type if initial else default_type
    with st.form(key, clear_on_submit=initial is None):
        kind = st.radio("Type", [INCOME, EXPENSE], index=[INCOME, EXPENSE].index(kind), horizontal=True)
        amount = st.number_input(
            "Amount", min_value=0.0, step=0.01, format="%.2f",
            value=float(initial.amount) if initial else None,
        )
        description = st.text_input("Description", value=initial.description if initial else "")
        suggested = st.session_state.get(f"{key}_suggested")
        current = suggested or (initial.category if initial else default_category(kind))
        category = st.selectbox("Category", CATEGORIES, index=CATEGORIES.index(current) if current in CATEGORIES else 0)
        day = st.date_input("Date", value=initial.date if initial else date.today())
        c1, c2 = st.columns(2)
        suggest = c1.form_submit_button("✨ AI Categorize")
        submitted = c2.form_submit_button("Update Transaction" if initial else f"Add {kind.title()}")

    if suggest and description.strip():
        with st.spinner("Asking Gemini..."):
            suggested = asyncio.run(get_assistant().categorize(description))
        if suggested in CATEGORIES:
            st.session_state[f"{key}_suggested"] = suggested
            st.rerun()

    if submitted:
        result = validate_transaction(
            {"type": kind, "amount": amount, "description": description, "category": category, "date": day},
            tid=initial.id if initial else None,
        )
        if result.is_left():
            st.warning(result.get_error()["message"])
            return
        t = result.get_or_else(None)
        st.session_state.pop(f"{key}_suggested", None)
        if initial:
            commit_transactions(update_transaction(st.session_state.transactions, t))
            st.session_state.editing_id = None
        else:
            commit_transactions(add_transaction(st.session_state.transactions, t))
        st.rerun()


st.sidebar.markdown(f"### 💰 {settings.app_name}")
menu = st.sidebar.radio("Menu", ["🏠 Dashboard", "🧾 Transactions", "💬 Gemini Insights"])

if menu == "🏠 Dashboard":
    report = DashboardService().snapshot(st.session_state.transactions, st.session_state.goals, date.today())
    result = report["result"]
    summary = result["summary"]

    k1, k2, k3 = st.columns(3)
    with k1:
        st.metric("Total Balance", money(summary.balance))
    with k2:
        st.metric("Income", money(summary.total_income))
    with k3:
        st.metric("Expenses", money(summary.total_expense))

    charts, budgets = st.columns([2, 1])
    with charts:
        trend = result["trend"]
        if trend:
            df_trend = pd.DataFrame([{**as_plain(d), "label": d.label} for d in trend])
            fig_trend = go.Figure()
            fig_trend.add_trace(go.Bar(x=df_trend["label"], y=df_trend["income"], name="Income", marker_color="#10b981"))
            fig_trend.add_trace(go.Bar(x=df_trend["label"], y=df_trend["expense"], name="Expense", marker_color="#ef4444"))
            fig_trend.update_layout(title="Recent Activity", barmode="group", margin=dict(t=40, b=10, l=10, r=10))
            st.plotly_chart(fig_trend, use_container_width=True)
        else:
            st.info("No transaction data to display")

        distribution = result["distribution"]
        df_cat = distribution.map(lambda totals: pd.DataFrame([as_plain(c) for c in totals]))
        if df_cat.is_some():
            fig_cat = px.pie(df_cat.get_or_else(None), values="total", names="category", hole=0.6, title="Expenses by Category")
            fig_cat.update_traces(hovertemplate="%{label}: $%{value:.2f}")
            st.plotly_chart(fig_cat, use_container_width=True)
        else:
            st.info("No expense data to display")

    with budgets:
        st.subheader("Monthly Budgets")
        statuses = result["budgets"]
        if not statuses:
            st.caption("Set monthly limits to track your spending.")
        for s in statuses:
            level = status_level(s.percentage)
            st.markdown(f"**{s.category}** &nbsp; {money(s.spent)} / {money(s.limit)}")
            st.progress(float(s.percentage) / 100)
            if s.is_over_budget:
                st.caption(f":red[Over budget by {money(s.spent - s.limit)}]")
            elif level in LEVEL_STYLE:
                st.caption(f":{LEVEL_STYLE[level]}[{float(s.percentage):.0f}% used]")

        with st.expander("Set Budgets"):
            current = {g.category: float(g.limit) for g in st.session_state.goals}
            with st.form("budget_goals"):
                values = {
                    cat: st.text_input(cat, value=f"{current[cat]:g}" if cat in current else "", placeholder="No limit")
                    for cat in BUDGET_CATEGORIES
                }
                if st.form_submit_button("Save Budgets"):
                    commit_goals(goals_from_form(values))
                    st.rerun()

    st.subheader("Recent Transactions")
    recent = recent_transactions(st.session_state.transactions)
    if recent:
        st.table(pd.DataFrame([
            {"Date": t.date.isoformat(), "Description": t.description, "Category": t.category, "Amount": signed(t)}
            for t in recent
        ]))
    else:
        st.info("No recent transactions")

    add_expense, add_income = st.columns(2)
    with add_expense.expander("➕ Add Expense"):
        transaction_form("new_expense")
    with add_income.expander("➕ Add Income"):
        transaction_form("new_income", default_type=INCOME)

elif menu == "🧾 Transactions":
    st.title("🧾 Transactions")
    query = st.text_input("Search transactions...", value="")
    filtered = search_transactions(st.session_state.transactions, query)

    if not filtered:
        st.info("No transactions found")

    for t in filtered:
        c1, c2, c3, c4 = st.columns([4, 2, 1, 1])
        c1.markdown(f"**{t.description}**  \n`{t.category}` · {t.date.isoformat()}")
        c2.markdown(f":{'green' if t.type == INCOME else 'red'}[{signed(t)}]")
        if c3.button("✏️", key=f"edit_{t.id}"):
            st.session_state.editing_id = t.id
            st.rerun()
        if c4.button("🗑️", key=f"del_{t.id}"):
            st.session_state.deleting_id = t.id
            st.rerun()
        if st.session_state.deleting_id == t.id:
            st.warning("Are you sure you want to delete this transaction?")
            yes, no = st.columns(2)
            if yes.button("Delete", key=f"confirm_del_{t.id}"):
                st.session_state.deleting_id = None
                commit_transactions(delete_transaction(st.session_state.transactions, t.id))
                st.rerun()
            if no.button("Cancel", key=f"cancel_del_{t.id}"):
                st.session_state.deleting_id = None
                st.rerun()
        if st.session_state.editing_id == t.id:
            transaction_form(f"edit_form_{t.id}", initial=t)

    st.divider()
    transaction_form("new_tx_list")

elif menu == "💬 Gemini Insights":
    st.title("💬 Gemini Insights")
    for msg in st.session_state.messages:
        with st.chat_message("user" if msg["role"] == "user" else "assistant"):
            st.markdown(msg["text"])

    question = None
    if len(st.session_state.messages) < 3:
        cols = st.columns(len(SUGGESTED_QUESTIONS))
        for col, s in zip(cols, SUGGESTED_QUESTIONS):
            if col.button(s):
                question = s

    question = st.chat_input("Ask about your finances...") or question
    if question and question.strip():
        st.session_state.messages.append({"role": "user", "text": question})
        with st.spinner("Thinking..."):
            answer = asyncio.run(get_assistant().analyze(st.session_state.transactions, question))
        st.session_state.messages.append({"role": "model", "text": answer})
        st.rerun()
