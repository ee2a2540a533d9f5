from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional

from finance_analytics.aggregation import total_of
from finance_analytics.constants import EXPENSE, INCOME, MONTHLY
from finance_analytics.domain import Transaction
from finance_analytics.filters import between, with_days
from finance_analytics.periods import (
    add_months,
    day_label,
    days_between,
    end_of_month,
    iso,
    iter_periods,
    month_key,
    month_label,
)


@dataclass(frozen=True)
class PeriodStat:
    period: str
    period_label: str
    start: str
    end: str
    income: float
    expense: float
    net: float
    transaction_count: int
    average_per_day: float


@dataclass(frozen=True)
class MonthlyTrend:
    month: str
    month_label: str
    income: float
    expense: float
    net: float
    transaction_count: int


@dataclass(frozen=True)
class CashFlowDay:
    date: str
    date_label: str
    income: float
    expense: float
    net: float


def bucketize(
    trans: Iterable[Transaction],
    start_date: str,
    end_date: str,
    granularity: str = MONTHLY,
) -> tuple[PeriodStat, ...]:
    """Income/expense statistics per daily, weekly or monthly bucket of [start, end]."""
    dated = with_days(trans)
    stats = []
    for period in iter_periods(start_date, end_date, granularity):
        bucket = between(dated, period.start, period.end)
        income = total_of(bucket, INCOME)
        expense = total_of(bucket, EXPENSE)
        stats.append(PeriodStat(
            period=period.key,
            period_label=period.label,
            start=iso(period.start),
            end=iso(period.end),
            income=income,
            expense=expense,
            net=income - expense,
            transaction_count=len(bucket),
            average_per_day=expense / max(1, days_between(period.start, period.end)),
        ))
    return tuple(stats)


def calculate_monthly_trends(
    trans: Iterable[Transaction],
    months: int = 12,
    today: Optional[date] = None,
) -> tuple[MonthlyTrend, ...]:
    today = today or date.today()
    dated = with_days(trans)
    current = today.replace(day=1)
    trends = []
    for offset in range(months - 1, -1, -1):
        first = add_months(current, -offset)
        month_trans = between(dated, first, end_of_month(first))
        income = total_of(month_trans, INCOME)
        expense = total_of(month_trans, EXPENSE)
        trends.append(MonthlyTrend(
            month=month_key(first),
            month_label=month_label(first),
            income=income,
            expense=expense,
            net=income - expense,
            transaction_count=len(month_trans),
        ))
    return tuple(trends)


def calculate_cash_flow(
    trans: Iterable[Transaction],
    days: int = 30,
    today: Optional[date] = None,
) -> tuple[CashFlowDay, ...]:
    today = today or date.today()
    by_day: dict[date, list[Transaction]] = {}
    for day, t in with_days(trans):
        by_day.setdefault(day, []).append(t)

    flow = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        day_trans = by_day.get(day, [])
        income = total_of(day_trans, INCOME)
        expense = total_of(day_trans, EXPENSE)
        flow.append(CashFlowDay(
            date=iso(day),
            date_label=day_label(day),
            income=income,
            expense=expense,
            net=income - expense,
        ))
    return tuple(flow)
