from abc import ABC, abstractmethod
from typing import Callable, Generic, Iterable, TypeVar

from finance_analytics.constants import SPLIT_EPSILON
from finance_analytics.domain import (
    UNCATEGORIZED,
    UNKNOWN_ACCOUNT,
    UNKNOWN_LABEL,
    Account,
    Category,
    Label,
    Transaction,
    split_total,
)

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Maybe(Generic[T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    def is_some(self) -> bool:
        return isinstance(self, Some)

    def is_none(self) -> bool:
        return not self.is_some()


class Some(Maybe[T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Some(f(self._value))

    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def __repr__(self) -> str:
        return f"Some({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Some) and self._value == other._value


class Nothing(Maybe[T]):

    def map(self, f: Callable[[T], U]) -> 'Maybe[U]':
        return Nothing()

    def bind(self, f: Callable[[T], 'Maybe[U]']) -> 'Maybe[U]':
        return Nothing()

    def get_or_else(self, default: T) -> T:
        return default

    def __repr__(self) -> str:
        return "Nothing()"

    def __eq__(self, other) -> bool:
        return isinstance(other, Nothing)


class Either(Generic[E, T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def get_error(self) -> E:
        pass

    def is_right(self) -> bool:
        return isinstance(self, Right)

    def is_left(self) -> bool:
        return not self.is_right()


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Right(f(self._value))

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def get_error(self) -> E:
        raise ValueError("Right carries no error")

    def __repr__(self) -> str:
        return f"Right({self._value!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return self

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return self

    def get_or_else(self, default: T) -> T:
        return default

    def get_error(self) -> E:
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error!r})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


def find_by_id(items: Iterable[T], item_id: str) -> Maybe[T]:
    for item in items:
        if getattr(item, "id", None) == item_id:
            return Some(item)
    return Nothing()


def resolve_category(cats: Iterable[Category], cat_id: str) -> Category:
    return find_by_id(cats, cat_id).get_or_else(UNCATEGORIZED)


def resolve_account(accs: Iterable[Account], acc_id: str) -> Account:
    return find_by_id(accs, acc_id).get_or_else(UNKNOWN_ACCOUNT)


def resolve_label(labels: Iterable[Label], label_id: str) -> Label:
    return find_by_id(labels, label_id).get_or_else(UNKNOWN_LABEL)


def validate_transaction(
    t: Transaction,
    accs: tuple[Account, ...],
    cats: tuple[Category, ...],
) -> Either[dict, Transaction]:
    """Check references and split consistency of one ledger record.

    The analytics functions tolerate every problem reported here; callers use
    the result for diagnostics only.
    """
    if find_by_id(accs, t.account_id).is_none():
        return Left({
            "error": "account_not_found",
            "message": f"Account with ID {t.account_id} does not exist",
            "account_id": t.account_id,
        })

    referenced = [s.category_id for s in t.splits] if t.splits else [t.category_id]
    missing = [cid for cid in referenced if find_by_id(cats, cid).is_none()]
    if missing and t.type != "transfer":
        return Left({
            "error": "category_not_found",
            "message": f"Category with ID {missing[0]} does not exist",
            "category_id": missing[0],
        })

    if t.splits:
        difference = abs(t.amount - split_total(t))
        if difference > SPLIT_EPSILON:
            return Left({
                "error": "split_mismatch",
                "message": (
                    f"Split amounts ({split_total(t):.2f}) do not equal "
                    f"transaction amount ({t.amount:.2f})"
                ),
                "difference": difference,
            })

    return Right(t)
