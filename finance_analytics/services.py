from dataclasses import asdict, dataclass
from datetime import date
from typing import Any, Callable, Dict, Iterable, NamedTuple, Optional, Sequence

from finance_analytics.aggregation import (
    calculate_account_spending,
    calculate_category_spending,
    calculate_label_spending,
    calculate_summary,
)
from finance_analytics.budgets import (
    calculate_budget_progress,
    calculate_investment_portfolio,
    calculate_planned_payments,
)
from finance_analytics.comparative import (
    calculate_balance_trend,
    calculate_category_trends,
    calculate_spending_predictions,
    calculate_year_over_year,
)
from finance_analytics.constants import DAILY, EXPENSE, INCOME, MONTHLY, WEEKLY
from finance_analytics.domain import Account, Category, LedgerSnapshot, Transaction
from finance_analytics.filters import FilterCriteria, filter_transactions
from finance_analytics.insights import generate_insights
from finance_analytics.periods import days_between, parse_day
from finance_analytics.timeseries import (
    PeriodStat,
    bucketize,
    calculate_cash_flow,
    calculate_monthly_trends,
)
from finance_analytics.trends import (
    AccountStatistics,
    CategoryPerformance,
    SpendingVelocity,
    TransactionFrequency,
    calculate_account_statistics,
    calculate_category_performance,
    calculate_spending_velocity,
    calculate_transaction_frequency,
)

DEFAULT_HISTORY_DAYS = 30


@dataclass(frozen=True)
class DashboardStatistics:
    spending_velocity: SpendingVelocity
    transaction_frequency: TransactionFrequency
    top_categories: tuple[CategoryPerformance, ...]
    account_stats: tuple[AccountStatistics, ...]
    daily_stats: tuple[PeriodStat, ...]
    weekly_stats: tuple[PeriodStat, ...]
    monthly_stats: tuple[PeriodStat, ...]
    insights: tuple[str, ...]


def dashboard_statistics(
    trans: Iterable[Transaction],
    accs: tuple[Account, ...],
    cats: tuple[Category, ...],
    start_date: str,
    end_date: str,
) -> DashboardStatistics:
    trans = tuple(trans)
    velocity = calculate_spending_velocity(trans, start_date, end_date)
    performance = calculate_category_performance(trans, cats, start_date, end_date)
    account_stats = calculate_account_statistics(trans, accs)

    return DashboardStatistics(
        spending_velocity=velocity,
        transaction_frequency=calculate_transaction_frequency(trans, start_date, end_date),
        top_categories=performance[:10],
        account_stats=account_stats[:10],
        daily_stats=bucketize(trans, start_date, end_date, DAILY)[-30:],
        weekly_stats=bucketize(trans, start_date, end_date, WEEKLY)[-12:],
        monthly_stats=bucketize(trans, start_date, end_date, MONTHLY)[-12:],
        insights=generate_insights(trans, velocity, performance, account_stats),
    )


class ReportContext(NamedTuple):
    snapshot: LedgerSnapshot
    start_date: str
    end_date: str
    today: date
    filtered: tuple[Transaction, ...]
    # same criteria without the date bounds, for reports that look outside the range
    unbounded: tuple[Transaction, ...]

    @property
    def history_days(self) -> int:
        start, end = parse_day(self.start_date), parse_day(self.end_date)
        if start is None or end is None or start > end:
            return DEFAULT_HISTORY_DAYS
        return days_between(start, end) + 1


Step = Callable[[ReportContext, Dict[str, Any]], Dict[str, Any]]


class ReportService:
    """Facade that builds the reports snapshot from injected report steps.

    steps: sequence of functions taking (context, acc) -> dict (partial results);
    acc holds everything earlier steps produced.
    """

    def __init__(self, steps: Sequence[Step]):
        self.steps = steps

    def build(
        self,
        snapshot: LedgerSnapshot,
        start_date: str,
        end_date: str,
        criteria: Optional[FilterCriteria] = None,
        today: Optional[date] = None,
    ) -> Dict[str, Any]:
        """Run every step and return the report with its intermediate outputs."""
        criteria = criteria or FilterCriteria()
        unbounded = FilterCriteria(**{**asdict(criteria), "start_date": None, "end_date": None})
        in_range = FilterCriteria(**{**asdict(criteria), "start_date": start_date, "end_date": end_date})
        ctx = ReportContext(
            snapshot=snapshot,
            start_date=start_date,
            end_date=end_date,
            today=today or date.today(),
            filtered=filter_transactions(snapshot.transactions, in_range),
            unbounded=filter_transactions(snapshot.transactions, unbounded),
        )
        report = {
            "start_date": start_date,
            "end_date": end_date,
            "steps": [],
            "result": {},
        }

        acc: Dict[str, Any] = {}
        for step in self.steps:
            out = step(ctx, acc)
            report["steps"].append({"step": getattr(step, "__name__", str(step)), "keys": sorted(out)})
            acc.update(out)

        report["result"] = acc
        return report


def summary_step(ctx: ReportContext, acc: Dict[str, Any]) -> Dict[str, Any]:
    return {"summary": calculate_summary(ctx.filtered)}


def spending_step(ctx: ReportContext, acc: Dict[str, Any]) -> Dict[str, Any]:
    snap = ctx.snapshot
    return {
        "expense_by_category": calculate_category_spending(ctx.filtered, snap.categories, EXPENSE),
        "income_by_category": calculate_category_spending(ctx.filtered, snap.categories, INCOME),
        "expense_by_label": calculate_label_spending(ctx.filtered, snap.labels, EXPENSE),
        "expense_by_account": calculate_account_spending(ctx.filtered, snap.accounts, EXPENSE),
    }


def timeline_step(ctx: ReportContext, acc: Dict[str, Any]) -> Dict[str, Any]:
    # the balance walks back through the whole ledger, not only the filtered view
    return {
        "monthly_trends": calculate_monthly_trends(ctx.filtered, 6, ctx.today),
        "balance_trend": calculate_balance_trend(
            ctx.snapshot.transactions, ctx.snapshot.accounts, ctx.history_days, ctx.today
        ),
        "cash_flow": calculate_cash_flow(ctx.filtered, ctx.history_days, ctx.today),
    }


def comparison_step(ctx: ReportContext, acc: Dict[str, Any]) -> Dict[str, Any]:
    trans = ctx.unbounded
    return {
        "year_over_year": calculate_year_over_year(trans, ctx.start_date, ctx.end_date),
        "category_trends": calculate_category_trends(
            trans, ctx.snapshot.categories, ctx.start_date, ctx.end_date, MONTHLY, top=5
        ),
        "predictions": calculate_spending_predictions(trans, ctx.start_date, ctx.end_date, 3),
    }


def planning_step(ctx: ReportContext, acc: Dict[str, Any]) -> Dict[str, Any]:
    snap = ctx.snapshot
    return {
        "budgets": calculate_budget_progress(snap.budgets, snap.transactions),
        "planned_payments": calculate_planned_payments(snap.planned, 6, ctx.today),
        "investment_portfolio": calculate_investment_portfolio(snap.accounts),
    }


def dashboard_step(ctx: ReportContext, acc: Dict[str, Any]) -> Dict[str, Any]:
    snap = ctx.snapshot
    return {
        "dashboard": dashboard_statistics(
            ctx.filtered, snap.accounts, snap.categories, ctx.start_date, ctx.end_date
        )
    }


DEFAULT_STEPS: tuple[Step, ...] = (
    summary_step,
    spending_step,
    timeline_step,
    comparison_step,
    planning_step,
    dashboard_step,
)


def default_report_service() -> ReportService:
    return ReportService(steps=DEFAULT_STEPS)


def as_rows(records: Iterable[Any]) -> list[dict]:
    return [asdict(r) for r in records]
