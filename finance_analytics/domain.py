from dataclasses import dataclass
from typing import NamedTuple, Optional, Union

from finance_analytics.constants import (
    PLACEHOLDER_COLOR,
    UNCATEGORIZED_ICON,
    UNCATEGORIZED_NAME,
    UNKNOWN_ACCOUNT_NAME,
    UNKNOWN_LABEL_NAME,
)


@dataclass(frozen=True)
class Account:
    id: str
    name: str
    type: str
    balance: float   # signed
    color: str = PLACEHOLDER_COLOR


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    icon: str
    color: str
    type: str  # "income" or "expense"


@dataclass(frozen=True)
class Label:
    id: str
    name: str
    color: str = PLACEHOLDER_COLOR


@dataclass(frozen=True)
class Split:
    category_id: str
    amount: float
    description: str = ""


# A transaction attributes its amount to categories in exactly one of two ways.
@dataclass(frozen=True)
class Atomic:
    category_id: str
    amount: float


@dataclass(frozen=True)
class SplitParts:
    parts: tuple[Split, ...]


Attribution = Union[Atomic, SplitParts]


@dataclass(frozen=True)
class Transaction:
    id: str
    account_id: str
    category_id: str
    type: str        # "income", "expense" or "transfer"
    amount: float    # never negative, direction comes from type
    date: str        # ISO date, e.g. "2025-09-01"
    description: str = ""
    time: Optional[str] = None
    item_name: Optional[str] = None
    to_account_id: Optional[str] = None
    splits: tuple[Split, ...] = ()
    labels: tuple[str, ...] = ()
    status: Optional[str] = None

    @property
    def attribution(self) -> Attribution:
        if self.splits:
            return SplitParts(self.splits)
        return Atomic(self.category_id, self.amount)


@dataclass(frozen=True)
class Budget:
    id: str
    name: str
    amount: float
    period: str  # "weekly", "monthly" or "yearly"
    start_date: str
    category_id: Optional[str] = None  # None means an overall budget
    end_date: Optional[str] = None
    color: str = PLACEHOLDER_COLOR


@dataclass(frozen=True)
class PlannedTransaction:
    id: str
    account_id: str
    category_id: str
    type: str
    amount: float
    scheduled_date: str
    status: str = "pending"
    next_occurrence_date: Optional[str] = None
    description: str = ""


class LedgerSnapshot(NamedTuple):
    accounts: tuple[Account, ...] = ()
    categories: tuple[Category, ...] = ()
    labels: tuple[Label, ...] = ()
    transactions: tuple[Transaction, ...] = ()
    budgets: tuple[Budget, ...] = ()
    planned: tuple[PlannedTransaction, ...] = ()


def category_allocations(t: Transaction) -> tuple[tuple[str, float], ...]:
    """(category_id, amount) pairs a transaction contributes to category totals."""
    attribution = t.attribution
    if isinstance(attribution, SplitParts):
        return tuple((s.category_id, s.amount) for s in attribution.parts)
    return ((attribution.category_id, attribution.amount),)


def split_total(t: Transaction) -> float:
    return sum(s.amount for s in t.splits)


UNCATEGORIZED = Category(
    id="",
    name=UNCATEGORIZED_NAME,
    icon=UNCATEGORIZED_ICON,
    color=PLACEHOLDER_COLOR,
    type="expense",
)
UNKNOWN_ACCOUNT = Account(id="", name=UNKNOWN_ACCOUNT_NAME, type="Other", balance=0.0)
UNKNOWN_LABEL = Label(id="", name=UNKNOWN_LABEL_NAME)
