"""Grouped sums and shares by category, account and label."""

from dataclasses import dataclass
from typing import Iterable, Optional

from finance_analytics.constants import EXPENSE, INCOME, TRANSFER
from finance_analytics.domain import (
    Account,
    Category,
    Label,
    Transaction,
    category_allocations,
)
from finance_analytics.functional import resolve_account, resolve_category, resolve_label


@dataclass(frozen=True)
class Accumulator:
    amount: float = 0.0
    count: int = 0

    def add(self, amount: float) -> "Accumulator":
        return Accumulator(self.amount + amount, self.count + 1)


@dataclass(frozen=True)
class DimensionSpending:
    id: str
    name: str
    amount: float
    percentage: float
    transaction_count: int
    icon: Optional[str] = None
    color: Optional[str] = None


@dataclass(frozen=True)
class Summary:
    total_income: float
    total_expense: float
    total_transfer: float
    net: float
    savings_rate: float
    transaction_count: int
    average_transaction: float


def percentage(part: float, total: float) -> float:
    return part / total * 100 if total > 0 else 0.0


def accumulate(pairs: Iterable[tuple[str, float]]) -> dict[str, Accumulator]:
    totals: dict[str, Accumulator] = {}
    for key, amount in pairs:
        totals[key] = totals.get(key, Accumulator()).add(amount)
    return totals


def total_of(trans: Iterable[Transaction], tx_type: str) -> float:
    return sum(t.amount for t in trans if t.type == tx_type)


def _ranked(
    totals: dict[str, Accumulator], describe
) -> tuple[DimensionSpending, ...]:
    grand_total = sum(acc.amount for acc in totals.values())
    rows = (
        describe(key, acc, percentage(acc.amount, grand_total))
        for key, acc in totals.items()
    )
    return tuple(sorted(rows, key=lambda r: (-r.amount, r.id)))


def calculate_category_spending(
    trans: Iterable[Transaction],
    cats: tuple[Category, ...],
    tx_type: str = EXPENSE,
) -> tuple[DimensionSpending, ...]:
    totals = accumulate(
        pair
        for t in trans
        if t.type == tx_type
        for pair in category_allocations(t)
    )

    def describe(cat_id: str, acc: Accumulator, share: float) -> DimensionSpending:
        cat = resolve_category(cats, cat_id)
        return DimensionSpending(
            id=cat_id,
            name=cat.name,
            icon=cat.icon,
            color=cat.color,
            amount=acc.amount,
            percentage=share,
            transaction_count=acc.count,
        )

    return _ranked(totals, describe)


def calculate_account_spending(
    trans: Iterable[Transaction],
    accs: tuple[Account, ...],
    tx_type: str = EXPENSE,
) -> tuple[DimensionSpending, ...]:
    # splits only subdivide category attribution, the account gets the whole amount
    totals = accumulate((t.account_id, t.amount) for t in trans if t.type == tx_type)

    def describe(acc_id: str, acc: Accumulator, share: float) -> DimensionSpending:
        account = resolve_account(accs, acc_id)
        return DimensionSpending(
            id=acc_id,
            name=account.name,
            color=account.color,
            amount=acc.amount,
            percentage=share,
            transaction_count=acc.count,
        )

    return _ranked(totals, describe)


def calculate_label_spending(
    trans: Iterable[Transaction],
    labels: tuple[Label, ...],
    tx_type: str = EXPENSE,
) -> tuple[DimensionSpending, ...]:
    totals = accumulate(
        (label_id, t.amount)
        for t in trans
        if t.type == tx_type
        for label_id in t.labels
    )

    def describe(label_id: str, acc: Accumulator, share: float) -> DimensionSpending:
        label = resolve_label(labels, label_id)
        return DimensionSpending(
            id=label_id,
            name=label.name,
            color=label.color,
            amount=acc.amount,
            percentage=share,
            transaction_count=acc.count,
        )

    return _ranked(totals, describe)


def calculate_summary(trans: Iterable[Transaction]) -> Summary:
    trans = tuple(trans)
    income = total_of(trans, INCOME)
    expense = total_of(trans, EXPENSE)
    count = len(trans)
    return Summary(
        total_income=income,
        total_expense=expense,
        total_transfer=total_of(trans, TRANSFER),
        net=income - expense,
        savings_rate=percentage(income - expense, income),
        transaction_count=count,
        average_transaction=(income + expense) / count if count else 0.0,
    )
