import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, Iterable, Iterator, Optional

from finance_analytics.domain import Transaction
from finance_analytics.periods import end_of_day, parse_date, parse_day, start_of_day

logger = logging.getLogger(__name__)

Predicate = Callable[[Transaction], bool]


@dataclass(frozen=True)
class FilterCriteria:
    type: Optional[str] = None  # "all" behaves like None
    account_ids: Optional[tuple[str, ...]] = None
    category_ids: Optional[tuple[str, ...]] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    min_amount: Optional[float] = None
    max_amount: Optional[float] = None
    search_query: Optional[str] = None


def iter_transactions(
    trans: Iterable[Transaction], pred: Predicate
) -> Iterator[Transaction]:
    for t in trans:
        if pred(t):
            yield t


def by_type(tx_type: str) -> Predicate:
    def _filter(t: Transaction) -> bool:
        return t.type == tx_type

    return _filter


def by_accounts(account_ids: Iterable[str]) -> Predicate:
    wanted = frozenset(account_ids)

    def _filter(t: Transaction) -> bool:
        return t.account_id in wanted

    return _filter


def by_categories(category_ids: Iterable[str]) -> Predicate:
    """Match the primary category or any split category."""
    wanted = frozenset(category_ids)

    def _filter(t: Transaction) -> bool:
        if t.category_id in wanted:
            return True
        return any(s.category_id in wanted for s in t.splits)

    return _filter


def by_date_range(start: Optional[str], end: Optional[str]) -> Predicate:
    lower = _bound(start, start_of_day)
    upper = _bound(end, end_of_day)

    def _filter(t: Transaction) -> bool:
        if lower is None and upper is None:
            return True
        ts = parse_date(t.date)
        if ts is None:
            return False
        if lower is not None and ts < lower:
            return False
        if upper is not None and ts > upper:
            return False
        return True

    return _filter


def by_amount_range(min_amount: Optional[float], max_amount: Optional[float]) -> Predicate:
    def _filter(t: Transaction) -> bool:
        if min_amount is not None and t.amount < min_amount:
            return False
        if max_amount is not None and t.amount > max_amount:
            return False
        return True

    return _filter


def by_search(query: str) -> Predicate:
    needle = query.lower()

    def _filter(t: Transaction) -> bool:
        if needle in (t.description or "").lower():
            return True
        return t.item_name is not None and needle in t.item_name.lower()

    return _filter


def _bound(value: Optional[str], widen):
    if value is None or value == "":
        return None
    day = parse_day(value)
    if day is None:
        logger.warning("Ignoring unparseable date bound %r", value)
        return None
    return widen(day)


def criteria_predicates(criteria: FilterCriteria) -> tuple[Predicate, ...]:
    preds: list[Predicate] = []
    if criteria.type and criteria.type != "all":
        preds.append(by_type(criteria.type))
    if criteria.account_ids:
        preds.append(by_accounts(criteria.account_ids))
    if criteria.category_ids:
        preds.append(by_categories(criteria.category_ids))
    if criteria.start_date or criteria.end_date:
        preds.append(by_date_range(criteria.start_date, criteria.end_date))
    if criteria.min_amount is not None or criteria.max_amount is not None:
        preds.append(by_amount_range(criteria.min_amount, criteria.max_amount))
    if criteria.search_query and criteria.search_query.strip():
        preds.append(by_search(criteria.search_query))
    return tuple(preds)


def filter_transactions(
    trans: Iterable[Transaction], criteria: FilterCriteria
) -> tuple[Transaction, ...]:
    preds = criteria_predicates(criteria)
    return tuple(iter_transactions(trans, lambda t: all(p(t) for p in preds)))


def with_days(trans: Iterable[Transaction]) -> tuple[tuple[date, Transaction], ...]:
    """Pair each transaction with its calendar day, dropping malformed dates."""
    pairs = []
    for t in trans:
        day = parse_day(t.date)
        if day is None:
            logger.debug("Skipping transaction %s with malformed date %r", t.id, t.date)
            continue
        pairs.append((day, t))
    return tuple(pairs)


def between(
    dated: Iterable[tuple[date, Transaction]], start: date, end: date
) -> tuple[Transaction, ...]:
    return tuple(t for day, t in dated if start <= day <= end)
