"""Spending velocity, activity frequency and per-category/per-account performance."""

import math
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from finance_analytics.constants import (
    DECREASING,
    EXPENSE,
    INCOME,
    INCREASING,
    STABLE,
    TREND_THRESHOLD_PERCENT,
    WEEKDAYS,
)
from finance_analytics.domain import Account, Category, Transaction, category_allocations
from finance_analytics.filters import with_days
from finance_analytics.functional import resolve_account, resolve_category
from finance_analytics.periods import days_between, iso, parse_day, start_of_day, weekday_name

ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class SpendingVelocity:
    daily_average: float
    weekly_average: float
    monthly_average: float
    trend: str
    change_percent: float


@dataclass(frozen=True)
class TransactionFrequency:
    total_transactions: int
    average_per_day: float
    average_per_week: float
    average_per_month: float
    most_active_day: str
    most_active_day_count: int
    day_counts: dict = field(default_factory=dict)


@dataclass(frozen=True)
class CategoryPerformance:
    category_id: str
    category_name: str
    category_icon: str
    category_color: str
    total_spent: float
    transaction_count: int
    average_amount: float
    largest_transaction: float
    smallest_transaction: float
    last_transaction_date: Optional[str]
    trend: str
    change_percent: float


@dataclass(frozen=True)
class AccountStatistics:
    account_id: str
    account_name: str
    total_income: float
    total_expense: float
    net_flow: float
    transaction_count: int
    average_transaction: float
    largest_transaction: float
    last_transaction_date: Optional[str]


@dataclass(frozen=True)
class HalfSplit:
    """A range cut at its exact midpoint instant."""
    midpoint: datetime
    first_days: int
    second_days: int

    def is_first_half(self, day: date) -> bool:
        return start_of_day(day) < self.midpoint

    def rates(self, dated_amounts: Iterable[tuple[date, float]]) -> tuple[float, float]:
        first_total = second_total = 0.0
        for day, amount in dated_amounts:
            if self.is_first_half(day):
                first_total += amount
            else:
                second_total += amount
        first = first_total / self.first_days if self.first_days > 0 else 0.0
        second = second_total / self.second_days if self.second_days > 0 else 0.0
        return first, second


def split_range(start: date, end: date) -> HalfSplit:
    lower, upper = start_of_day(start), start_of_day(end)
    midpoint = lower + (upper - lower) / 2
    return HalfSplit(
        midpoint=midpoint,
        first_days=math.ceil((midpoint - lower) / ONE_DAY),
        second_days=math.ceil((upper - midpoint) / ONE_DAY),
    )


def classify_trend(first: float, second: float) -> tuple[str, float]:
    if first <= 0:
        return STABLE, 0.0
    change = (second - first) / first * 100
    if change > TREND_THRESHOLD_PERCENT:
        return INCREASING, change
    if change < -TREND_THRESHOLD_PERCENT:
        return DECREASING, change
    return STABLE, change


def _range(start_date, end_date) -> Optional[tuple[date, date]]:
    start, end = parse_day(start_date), parse_day(end_date)
    if start is None or end is None or start > end:
        return None
    return start, end


def calculate_spending_velocity(
    trans: Iterable[Transaction], start_date: str, end_date: str
) -> SpendingVelocity:
    bounds = _range(start_date, end_date)
    if bounds is None:
        return SpendingVelocity(0.0, 0.0, 0.0, STABLE, 0.0)
    start, end = bounds

    expenses = tuple(
        (day, t.amount)
        for day, t in with_days(trans)
        if t.type == EXPENSE and start <= day <= end
    )
    span = days_between(start, end)
    daily = sum(amount for _, amount in expenses) / span if span > 0 else 0.0
    trend, change = classify_trend(*split_range(start, end).rates(expenses))

    return SpendingVelocity(
        daily_average=daily,
        weekly_average=daily * 7,
        monthly_average=daily * 30,
        trend=trend,
        change_percent=change,
    )


def calculate_transaction_frequency(
    trans: Iterable[Transaction], start_date: str, end_date: str
) -> TransactionFrequency:
    trans = tuple(trans)
    counts = {name: 0 for name in WEEKDAYS}
    for day, _ in with_days(trans):
        counts[weekday_name(day)] += 1

    # max() keeps the first of equal counts, so ties resolve Sunday-first
    most_active = max(WEEKDAYS, key=lambda name: counts[name])

    bounds = _range(start_date, end_date)
    span = days_between(*bounds) if bounds else 0
    total = len(trans)

    return TransactionFrequency(
        total_transactions=total,
        average_per_day=total / span if span > 0 else 0.0,
        average_per_week=total / (span / 7) if span > 0 else 0.0,
        average_per_month=total / (span / 30) if span > 0 else 0.0,
        most_active_day=most_active,
        most_active_day_count=counts[most_active],
        day_counts=counts,
    )


def calculate_category_performance(
    trans: Iterable[Transaction],
    cats: tuple[Category, ...],
    start_date: str,
    end_date: str,
) -> tuple[CategoryPerformance, ...]:
    bounds = _range(start_date, end_date)
    if bounds is None:
        return ()
    start, end = bounds
    halves = split_range(start, end)

    entries: dict[str, list[tuple[date, float]]] = {}
    for day, t in with_days(trans):
        if t.type != EXPENSE or not start <= day <= end:
            continue
        for cat_id, amount in category_allocations(t):
            entries.setdefault(cat_id, []).append((day, amount))

    performances = []
    for cat_id, items in entries.items():
        cat = resolve_category(cats, cat_id)
        amounts = [amount for _, amount in items]
        total = sum(amounts)
        trend, change = classify_trend(*halves.rates(items))
        performances.append(CategoryPerformance(
            category_id=cat_id,
            category_name=cat.name,
            category_icon=cat.icon,
            category_color=cat.color,
            total_spent=total,
            transaction_count=len(items),
            average_amount=total / len(items),
            largest_transaction=max(amounts),
            smallest_transaction=min(amounts),
            last_transaction_date=iso(max(day for day, _ in items)),
            trend=trend,
            change_percent=change,
        ))

    return tuple(sorted(performances, key=lambda p: (-p.total_spent, p.category_id)))


def calculate_account_statistics(
    trans: Iterable[Transaction], accs: tuple[Account, ...]
) -> tuple[AccountStatistics, ...]:
    grouped: dict[str, list[Transaction]] = {}
    for t in trans:
        grouped.setdefault(t.account_id, []).append(t)

    stats = []
    for acc_id, items in grouped.items():
        income = sum(t.amount for t in items if t.type == INCOME)
        expense = sum(t.amount for t in items if t.type == EXPENSE)
        days = [day for day in (parse_day(t.date) for t in items) if day is not None]
        stats.append(AccountStatistics(
            account_id=acc_id,
            account_name=resolve_account(accs, acc_id).name,
            total_income=income,
            total_expense=expense,
            net_flow=income - expense,
            transaction_count=len(items),
            average_transaction=(income + expense) / len(items),
            largest_transaction=max(abs(t.amount) for t in items),
            last_transaction_date=iso(max(days)) if days else None,
        ))

    return tuple(sorted(stats, key=lambda s: (-s.transaction_count, s.account_id)))
