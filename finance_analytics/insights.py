from typing import Callable, Optional, Sequence

from finance_analytics.aggregation import percentage, total_of
from finance_analytics.constants import (
    EXPENSE,
    INCOME,
    INSIGHT_GOOD_SAVINGS_PERCENT,
    INSIGHT_LARGE_EXPENSE_FACTOR,
    INSIGHT_LIMIT,
    INSIGHT_TOP_CATEGORY_PERCENT,
    INSIGHT_VELOCITY_PERCENT,
)
from finance_analytics.domain import Transaction
from finance_analytics.trends import AccountStatistics, CategoryPerformance, SpendingVelocity

Rule = Callable[
    [Sequence[Transaction], SpendingVelocity, Sequence[CategoryPerformance], Sequence[AccountStatistics]],
    Optional[str],
]


def velocity_insight(trans, velocity, performance, account_stats) -> Optional[str]:
    change = velocity.change_percent
    if change > INSIGHT_VELOCITY_PERCENT:
        return f"Your spending has increased by {change:.1f}% - consider reviewing your expenses"
    if change < -INSIGHT_VELOCITY_PERCENT:
        return f"Great! Your spending has decreased by {abs(change):.1f}%"
    return None


def top_category_insight(trans, velocity, performance, account_stats) -> Optional[str]:
    if not performance or performance[0].total_spent <= 0:
        return None
    top = performance[0]
    share = percentage(top.total_spent, sum(p.total_spent for p in performance))
    if share > INSIGHT_TOP_CATEGORY_PERCENT:
        return f"{top.category_name} accounts for {share:.1f}% of your spending"
    return None


def busiest_account_insight(trans, velocity, performance, account_stats) -> Optional[str]:
    if len(account_stats) <= 1:
        return None
    busiest = account_stats[0]
    return f"Most transactions ({busiest.transaction_count}) are from {busiest.account_name}"


def large_expenses_insight(trans, velocity, performance, account_stats) -> Optional[str]:
    expenses = [t.amount for t in trans if t.type == EXPENSE]
    if not expenses:
        return None
    mean = sum(expenses) / len(expenses)
    large = sum(1 for amount in expenses if amount > mean * INSIGHT_LARGE_EXPENSE_FACTOR)
    if not large:
        return None
    plural = "s" if large != 1 else ""
    return f"You have {large} large transaction{plural} above average"


def savings_insight(trans, velocity, performance, account_stats) -> Optional[str]:
    income = total_of(trans, INCOME)
    if income <= 0:
        return None
    rate = percentage(income - total_of(trans, EXPENSE), income)
    if rate > INSIGHT_GOOD_SAVINGS_PERCENT:
        return f"Excellent! You're saving {rate:.1f}% of your income"
    if rate < 0:
        return "You're spending more than you earn - consider reviewing your budget"
    return None


# priority order
INSIGHT_RULES: tuple[Rule, ...] = (
    velocity_insight,
    top_category_insight,
    busiest_account_insight,
    large_expenses_insight,
    savings_insight,
)


def generate_insights(
    trans: Sequence[Transaction],
    velocity: SpendingVelocity,
    performance: Sequence[CategoryPerformance],
    account_stats: Sequence[AccountStatistics],
    rules: Sequence[Rule] = INSIGHT_RULES,
) -> tuple[str, ...]:
    trans = tuple(trans)
    messages = (rule(trans, velocity, performance, account_stats) for rule in rules)
    return tuple(m for m in messages if m)[:INSIGHT_LIMIT]
