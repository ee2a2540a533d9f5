import json
import logging

from finance_analytics.domain import (
    Account,
    Budget,
    Category,
    Label,
    LedgerSnapshot,
    PlannedTransaction,
    Split,
    Transaction,
)
from finance_analytics.functional import validate_transaction

logger = logging.getLogger(__name__)


def transaction_from_dict(raw: dict) -> Transaction:
    data = dict(raw)
    data["splits"] = tuple(Split(**s) for s in data.get("splits") or ())
    data["labels"] = tuple(data.get("labels") or ())
    data["amount"] = float(data["amount"])
    return Transaction(**data)


def snapshot_from_dict(data: dict) -> LedgerSnapshot:
    return LedgerSnapshot(
        accounts=tuple(Account(**a) for a in data.get("accounts", ())),
        categories=tuple(Category(**c) for c in data.get("categories", ())),
        labels=tuple(Label(**lb) for lb in data.get("labels", ())),
        transactions=tuple(transaction_from_dict(t) for t in data.get("transactions", ())),
        budgets=tuple(Budget(**b) for b in data.get("budgets", ())),
        planned=tuple(PlannedTransaction(**p) for p in data.get("planned", ())),
    )


def report_problems(snapshot: LedgerSnapshot) -> tuple[dict, ...]:
    """Validation errors of every transaction; records are kept either way."""
    problems = []
    for t in snapshot.transactions:
        result = validate_transaction(t, snapshot.accounts, snapshot.categories)
        if result.is_left():
            problems.append({"transaction_id": t.id, **result.get_error()})
    return tuple(problems)


def load_seed(path: str) -> LedgerSnapshot:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    snapshot = snapshot_from_dict(data)
    for problem in report_problems(snapshot):
        logger.warning("Transaction %s: %s", problem["transaction_id"], problem["message"])

    logger.info(
        "Loaded %d accounts, %d categories, %d transactions from %s",
        len(snapshot.accounts),
        len(snapshot.categories),
        len(snapshot.transactions),
        path,
    )
    return snapshot
