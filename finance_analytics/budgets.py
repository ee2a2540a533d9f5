from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional

from finance_analytics.aggregation import percentage
from finance_analytics.constants import (
    EXPENSE,
    INVESTMENT_ACCOUNT_TYPES,
    SPLIT_EPSILON,
    WEEKLY,
    YEARLY,
)
from finance_analytics.domain import (
    Account,
    Budget,
    PlannedTransaction,
    Transaction,
    category_allocations,
)
from finance_analytics.filters import between, with_days
from finance_analytics.functional import Either, Left, Right
from finance_analytics.periods import (
    add_months,
    end_of_month,
    iso,
    month_key,
    month_label,
    parse_day,
    shift_years,
)


@dataclass(frozen=True)
class BudgetProgress:
    budget_id: str
    budget_name: str
    category_id: Optional[str]
    budget_amount: float
    spent: float
    remaining: float
    percentage: float
    exceeded: bool
    color: str
    start_date: Optional[str]
    end_date: Optional[str]


@dataclass(frozen=True)
class PlannedPaymentMonth:
    month: str
    month_label: str
    total_amount: float
    pending_count: int
    completed_count: int


@dataclass(frozen=True)
class PortfolioShare:
    account_id: str
    account_name: str
    account_type: str
    balance: float
    percentage: float


def budget_period_end(budget: Budget) -> Optional[date]:
    explicit = parse_day(budget.end_date)
    if explicit is not None:
        return explicit
    start = parse_day(budget.start_date)
    if start is None:
        return None
    if budget.period == WEEKLY:
        return start + timedelta(days=7)
    if budget.period == YEARLY:
        return shift_years(start, 1)
    return add_months(start, 1)


def budget_spent(budget: Budget, trans: Iterable[Transaction]) -> float:
    """Expense attributed to a budget inside its period.

    A category budget counts only the matching splits of a split transaction;
    an overall budget counts every expense in full.
    """
    start, end = parse_day(budget.start_date), budget_period_end(budget)
    if start is None or end is None:
        return 0.0

    spent = 0.0
    for t in between(with_days(trans), start, end):
        if t.type != EXPENSE:
            continue
        if budget.category_id is None:
            spent += t.amount
        else:
            spent += sum(
                amount for cat_id, amount in category_allocations(t)
                if cat_id == budget.category_id
            )
    return spent


def budget_progress(budget: Budget, trans: Iterable[Transaction]) -> BudgetProgress:
    spent = budget_spent(budget, trans)
    end = budget_period_end(budget)
    return BudgetProgress(
        budget_id=budget.id,
        budget_name=budget.name,
        category_id=budget.category_id,
        budget_amount=budget.amount,
        spent=spent,
        remaining=budget.amount - spent,
        percentage=percentage(spent, budget.amount),
        exceeded=spent - budget.amount > SPLIT_EPSILON,
        color=budget.color,
        start_date=budget.start_date,
        end_date=iso(end) if end else None,
    )


def calculate_budget_progress(
    budgets: Iterable[Budget], trans: Iterable[Transaction]
) -> tuple[BudgetProgress, ...]:
    trans = tuple(trans)
    return tuple(budget_progress(b, trans) for b in budgets)


def check_budget(budget: Budget, trans: Iterable[Transaction]) -> Either[dict, Budget]:
    progress = budget_progress(budget, trans)
    if progress.exceeded:
        return Left({
            "error": "budget_exceeded",
            "message": f"Budget limit exceeded for {budget.name}",
            "budget_id": budget.id,
            "limit": budget.amount,
            "spent": progress.spent,
            "over_budget": progress.spent - budget.amount,
        })
    return Right(budget)


def calculate_planned_payments(
    planned: Iterable[PlannedTransaction],
    months: int = 6,
    today: Optional[date] = None,
) -> tuple[PlannedPaymentMonth, ...]:
    today = today or date.today()
    scheduled = tuple(
        (day, p)
        for day, p in ((parse_day(p.scheduled_date), p) for p in planned)
        if day is not None and p.status != "cancelled"
    )

    charts = []
    for ahead in range(months):
        first = add_months(today.replace(day=1), ahead)
        last = end_of_month(first)
        month_items = [p for day, p in scheduled if first <= day <= last]
        charts.append(PlannedPaymentMonth(
            month=month_key(first),
            month_label=month_label(first),
            total_amount=sum(p.amount for p in month_items),
            pending_count=sum(1 for p in month_items if p.status == "pending"),
            completed_count=sum(1 for p in month_items if p.status == "completed"),
        ))
    return tuple(charts)


def calculate_investment_portfolio(accs: Iterable[Account]) -> tuple[PortfolioShare, ...]:
    investments = [a for a in accs if a.type in INVESTMENT_ACCOUNT_TYPES]
    total = sum(a.balance for a in investments)
    shares = (
        PortfolioShare(
            account_id=a.id,
            account_name=a.name,
            account_type=a.type,
            balance=a.balance,
            percentage=percentage(a.balance, total),
        )
        for a in investments
    )
    return tuple(sorted(shares, key=lambda s: (-s.balance, s.account_id)))
