"""Balance reconstruction, year-over-year comparison, category trends and forecasts."""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional

import numpy as np

from finance_analytics.aggregation import calculate_category_spending, total_of
from finance_analytics.constants import (
    EXPENSE,
    HIGH,
    HIGH_CONFIDENCE_CV,
    INCOME,
    LOW,
    LOW_CONFIDENCE_CV,
    MEDIUM,
    MIN_PREDICTION_MONTHS,
    MONTHLY,
    PREDICTION_LOOKBACK_MONTHS,
    STABLE,
)
from finance_analytics.domain import Account, Category, Transaction, category_allocations
from finance_analytics.filters import between, with_days
from finance_analytics.periods import (
    add_months,
    day_label,
    days_between,
    iso,
    iter_periods,
    month_key,
    month_label,
    parse_day,
    shift_years,
)
from finance_analytics.timeseries import bucketize
from finance_analytics.trends import classify_trend

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BalancePoint:
    date: str
    date_label: str
    balance: float


@dataclass(frozen=True)
class PeriodTotals:
    income: float = 0.0
    expense: float = 0.0
    net: float = 0.0
    transaction_count: int = 0


@dataclass(frozen=True)
class PeriodChanges:
    income_change: float
    expense_change: float
    net_change: float
    income_change_percent: float
    expense_change_percent: float
    net_change_percent: float


@dataclass(frozen=True)
class YearOverYearComparison:
    current_start: str
    current_end: str
    previous_start: str
    previous_end: str
    current_period: PeriodTotals
    previous_period: PeriodTotals
    changes: PeriodChanges


@dataclass(frozen=True)
class CategoryPeriodAmount:
    period: str
    period_label: str
    amount: float


@dataclass(frozen=True)
class CategoryTrend:
    category_id: str
    category_name: str
    category_icon: str
    category_color: str
    periods: tuple[CategoryPeriodAmount, ...]
    total_amount: float
    average_amount: float
    trend: str
    change_percent: float


@dataclass(frozen=True)
class SpendingPrediction:
    period: str
    period_label: str
    predicted_income: float
    predicted_expense: float
    predicted_net: float
    confidence: str


def calculate_balance_trend(
    trans: Iterable[Transaction],
    accs: Iterable[Account],
    days: int = 30,
    today: Optional[date] = None,
) -> tuple[BalancePoint, ...]:
    """Reconstruct end-of-day total balances by undoing each day's transactions.

    Assumes the account balances are current and the ledger is complete.
    Transfers move money between accounts and leave the total unchanged.
    """
    today = today or date.today()
    by_day: dict[date, list[Transaction]] = {}
    for day, t in with_days(trans):
        by_day.setdefault(day, []).append(t)

    running = sum(a.balance for a in accs)
    points = []
    for offset in range(days):
        day = today - timedelta(days=offset)
        points.append(BalancePoint(iso(day), day_label(day), running))
        for t in by_day.get(day, ()):
            if t.type == INCOME:
                running -= t.amount
            elif t.type == EXPENSE:
                running += t.amount

    return tuple(reversed(points))


def _totals(trans: tuple[Transaction, ...]) -> PeriodTotals:
    income = total_of(trans, INCOME)
    expense = total_of(trans, EXPENSE)
    return PeriodTotals(income, expense, income - expense, len(trans))


def calculate_year_over_year(
    trans: Iterable[Transaction], start_date: str, end_date: str
) -> Optional[YearOverYearComparison]:
    start, end = parse_day(start_date), parse_day(end_date)
    if start is None or end is None:
        return None

    previous_end = shift_years(end, -1)
    previous_start = previous_end - timedelta(days=days_between(start, end))

    dated = with_days(trans)
    current = _totals(between(dated, start, end))
    previous = _totals(between(dated, previous_start, previous_end))

    income_change = current.income - previous.income
    expense_change = current.expense - previous.expense
    net_change = current.net - previous.net

    return YearOverYearComparison(
        current_start=iso(start),
        current_end=iso(end),
        previous_start=iso(previous_start),
        previous_end=iso(previous_end),
        current_period=current,
        previous_period=previous,
        changes=PeriodChanges(
            income_change=income_change,
            expense_change=expense_change,
            net_change=net_change,
            income_change_percent=(
                income_change / previous.income * 100 if previous.income > 0 else 0.0
            ),
            expense_change_percent=(
                expense_change / previous.expense * 100 if previous.expense > 0 else 0.0
            ),
            net_change_percent=(
                net_change / abs(previous.net) * 100 if previous.net != 0 else 0.0
            ),
        ),
    )


def calculate_category_trends(
    trans: Iterable[Transaction],
    cats: tuple[Category, ...],
    start_date: str,
    end_date: str,
    granularity: str = MONTHLY,
    top: Optional[int] = None,
) -> tuple[CategoryTrend, ...]:
    periods = tuple(iter_periods(start_date, end_date, granularity))
    if not periods:
        return ()

    expenses = tuple((day, t) for day, t in with_days(trans) if t.type == EXPENSE)
    in_range = between(expenses, periods[0].start, periods[-1].end)
    ranked = calculate_category_spending(in_range, cats, EXPENSE)
    if top is not None:
        ranked = ranked[:top]

    # per period, the category amounts of every expense in it
    period_allocations = [
        tuple(pair for t in between(expenses, p.start, p.end) for pair in category_allocations(t))
        for p in periods
    ]

    trends = []
    for spending in ranked:
        amounts = [
            sum(amount for cat_id, amount in pairs if cat_id == spending.id)
            for pairs in period_allocations
        ]
        total = sum(amounts)
        half = len(amounts) // 2
        first = sum(amounts[:half]) / half if half > 0 else 0.0
        second = sum(amounts[half:]) / (len(amounts) - half)
        # a category with no spend in either half has no trend
        if first > 0 and second > 0:
            trend, change = classify_trend(first, second)
        else:
            trend, change = STABLE, 0.0
        trends.append(CategoryTrend(
            category_id=spending.id,
            category_name=spending.name,
            category_icon=spending.icon,
            category_color=spending.color,
            periods=tuple(
                CategoryPeriodAmount(p.key, p.label, amount)
                for p, amount in zip(periods, amounts)
            ),
            total_amount=total,
            average_amount=total / len(amounts),
            trend=trend,
            change_percent=change,
        ))

    return tuple(sorted(trends, key=lambda tr: (-tr.total_amount, tr.category_id)))


def coefficient_of_variation(values) -> float:
    values = np.asarray(values, dtype=float)
    mean = float(values.mean())
    if mean <= 0:
        return 1.0
    return float(values.std()) / mean


def classify_confidence(cv: float) -> str:
    if cv < HIGH_CONFIDENCE_CV:
        return HIGH
    if cv > LOW_CONFIDENCE_CV:
        return LOW
    return MEDIUM


def calculate_spending_predictions(
    trans: Iterable[Transaction],
    start_date: str,
    end_date: str,
    months_ahead: int = 3,
) -> tuple[SpendingPrediction, ...]:
    history = bucketize(trans, start_date, end_date, MONTHLY)
    if len(history) < MIN_PREDICTION_MONTHS:
        logger.debug("Need %d months of history to forecast, got %d", MIN_PREDICTION_MONTHS, len(history))
        return ()

    recent = history[-PREDICTION_LOOKBACK_MONTHS:]
    incomes = [b.income for b in recent]
    expenses = [b.expense for b in recent]
    avg_income = float(np.mean(incomes))
    avg_expense = float(np.mean(expenses))
    cv = (coefficient_of_variation(incomes) + coefficient_of_variation(expenses)) / 2
    confidence = classify_confidence(cv)

    end = parse_day(end_date)
    predictions = []
    for ahead in range(1, months_ahead + 1):
        month = add_months(end, ahead)
        predictions.append(SpendingPrediction(
            period=month_key(month),
            period_label=month_label(month),
            predicted_income=avg_income,
            predicted_expense=avg_expense,
            predicted_net=avg_income - avg_expense,
            confidence=confidence,
        ))
    return tuple(predictions)
