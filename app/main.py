import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import logging
from datetime import date, timedelta

import streamlit as st
import pandas as pd
import plotly.graph_objects as go
import plotly.express as px

from finance_analytics.constants import EXPENSE, INCOME
from finance_analytics.filters import FilterCriteria
from finance_analytics.loaders import load_seed
from finance_analytics.periods import iso
from finance_analytics.services import as_rows, default_report_service

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

st.set_page_config(page_title="Finance Analytics", layout="wide")

SEED_PATH = os.environ.get("FINANCE_SEED_PATH", "data/seed.json")


@st.cache_data
def load_snapshot(path):
    return load_seed(path)


snapshot = load_snapshot(SEED_PATH)
accounts, categories = snapshot.accounts, snapshot.categories

today = date.today()
date_range = st.sidebar.date_input(
    "Date Range",
    value=(today - timedelta(days=89), today),
    key="report_date_range",
)
if len(date_range) != 2:
    st.stop()
start_date, end_date = iso(date_range[0]), iso(date_range[1])

tx_type = st.sidebar.selectbox("Type", ["all", INCOME, EXPENSE])
selected_accounts = st.sidebar.multiselect("Account", options=[a.name for a in accounts], default=[])
selected_categories = st.sidebar.multiselect("Category", options=[c.name for c in categories], default=[])
search = st.sidebar.text_input("Search", value="")

criteria = FilterCriteria(
    type=None if tx_type == "all" else tx_type,
    account_ids=tuple(a.id for a in accounts if a.name in selected_accounts) or None,
    category_ids=tuple(c.id for c in categories if c.name in selected_categories) or None,
    search_query=search or None,
)

report = default_report_service().build(snapshot, start_date, end_date, criteria, today)
result = report["result"]

menu = st.sidebar.radio(
    "Menu",
    ["🏠 Overview", "📂 Categories", "📈 Trends", "🔁 Comparison", "🎯 Budgets"]
)

if menu == "🏠 Overview":
    summary = result["summary"]
    k1, k2, k3, k4 = st.columns(4)
    with k1:
        st.metric("Income", f"{summary.total_income:,.0f}")
    with k2:
        st.metric("Expense", f"{summary.total_expense:,.0f}")
    with k3:
        st.metric("Net", f"{summary.net:,.0f}")
    with k4:
        st.metric("Savings Rate", f"{summary.savings_rate:.1f}%")

    for message in result["dashboard"].insights:
        st.info(message)

    trends = pd.DataFrame(as_rows(result["monthly_trends"]))
    if not trends.empty:
        fig_ts = go.Figure()
        fig_ts.add_trace(go.Scatter(x=trends["month_label"], y=trends["income"], mode="lines+markers", name="Income"))
        fig_ts.add_trace(go.Scatter(x=trends["month_label"], y=trends["expense"], mode="lines+markers", name="Expense"))
        fig_ts.update_layout(template="plotly_dark", margin=dict(t=30, b=10, l=10, r=10))
        st.plotly_chart(fig_ts, use_container_width=True)

    balance = pd.DataFrame(as_rows(result["balance_trend"]))
    if not balance.empty:
        fig_bal = px.line(balance, x="date", y="balance", title="Balance", template="plotly_dark")
        st.plotly_chart(fig_bal, use_container_width=True)

elif menu == "📂 Categories":
    col1, col2 = st.columns(2)
    with col1:
        df_cat = pd.DataFrame(as_rows(result["expense_by_category"][:10]))
        if df_cat.empty:
            st.caption("No expenses in this range.")
        else:
            fig_cat = px.pie(df_cat, values="amount", names="name", title="Expenses by category")
            st.plotly_chart(fig_cat, use_container_width=True)
    with col2:
        df_acc = pd.DataFrame(as_rows(result["expense_by_account"]))
        if not df_acc.empty:
            fig_acc = px.bar(df_acc, x="name", y="amount", title="Expenses by account", template="plotly_dark")
            st.plotly_chart(fig_acc, use_container_width=True)

    st.dataframe(pd.DataFrame(as_rows(result["expense_by_label"])), use_container_width=True)
    st.dataframe(pd.DataFrame(as_rows(result["dashboard"].top_categories)), use_container_width=True)

elif menu == "📈 Trends":
    dashboard = result["dashboard"]
    velocity = dashboard.spending_velocity
    k1, k2, k3 = st.columns(3)
    with k1:
        st.metric("Daily Average", f"{velocity.daily_average:,.0f}")
    with k2:
        st.metric("Weekly Average", f"{velocity.weekly_average:,.0f}")
    with k3:
        st.metric("Trend", velocity.trend, f"{velocity.change_percent:.1f}%")

    granularity = st.selectbox("Buckets", ["daily_stats", "weekly_stats", "monthly_stats"])
    df_buckets = pd.DataFrame(as_rows(getattr(dashboard, granularity)))
    if not df_buckets.empty:
        fig = px.bar(df_buckets, x="period_label", y=["income", "expense"], barmode="group", template="plotly_dark")
        st.plotly_chart(fig, use_container_width=True)

    cash = pd.DataFrame(as_rows(result["cash_flow"]))
    if not cash.empty:
        fig_cf = px.bar(cash, x="date", y="net", title="Cash flow", template="plotly_dark")
        st.plotly_chart(fig_cf, use_container_width=True)

    st.dataframe(pd.DataFrame(as_rows(dashboard.account_stats)), use_container_width=True)

elif menu == "🔁 Comparison":
    yoy = result["year_over_year"]
    if yoy is None:
        st.caption("Pick a valid date range to compare.")
    else:
        k1, k2, k3 = st.columns(3)
        with k1:
            st.metric("Income", f"{yoy.current_period.income:,.0f}", f"{yoy.changes.income_change_percent:.1f}%")
        with k2:
            st.metric("Expense", f"{yoy.current_period.expense:,.0f}", f"{yoy.changes.expense_change_percent:.1f}%")
        with k3:
            st.metric("Net", f"{yoy.current_period.net:,.0f}", f"{yoy.changes.net_change:,.0f}")

    rows = [
        {"category": t.category_name, "period": p.period_label, "amount": p.amount}
        for t in result["category_trends"]
        for p in t.periods
    ]
    if rows:
        fig = px.line(pd.DataFrame(rows), x="period", y="amount", color="category", template="plotly_dark")
        st.plotly_chart(fig, use_container_width=True)

    predictions = pd.DataFrame(as_rows(result["predictions"]))
    if predictions.empty:
        st.caption("Not enough history for a forecast.")
    else:
        st.dataframe(predictions, use_container_width=True)

elif menu == "🎯 Budgets":
    budgets = pd.DataFrame(as_rows(result["budgets"]))
    if not budgets.empty:
        fig = px.bar(budgets, x="budget_name", y=["spent", "remaining"], title="Budgets", template="plotly_dark")
        st.plotly_chart(fig, use_container_width=True)
        st.dataframe(budgets, use_container_width=True)

    planned = pd.DataFrame(as_rows(result["planned_payments"]))
    if not planned.empty:
        fig_pp = px.bar(planned, x="month_label", y="total_amount", title="Planned payments", template="plotly_dark")
        st.plotly_chart(fig_pp, use_container_width=True)

    portfolio = pd.DataFrame(as_rows(result["investment_portfolio"]))
    if not portfolio.empty:
        fig_pf = px.pie(portfolio, values="balance", names="account_name", title="Investment portfolio")
        st.plotly_chart(fig_pf, use_container_width=True)
