from finance_analytics.domain import Account, Category, Split, Transaction, category_allocations
from finance_analytics.functional import (
    Left,
    Nothing,
    Right,
    Some,
    find_by_id,
    resolve_category,
    validate_transaction,
)


ACCS = (Account("a1", "Checking", "Bank", 100.0),)
CATS = (
    Category("c1", "Food", "🍔", "#ff0000", "expense"),
    Category("c2", "Fun", "🎉", "#00ff00", "expense"),
)


def make_tx(**kw):
    data = dict(id="t1", account_id="a1", category_id="c1", type="expense", amount=100, date="2024-01-01")
    data.update(kw)
    return Transaction(**data)


def test_maybe_basic():
    m = Some(10).map(lambda x: x + 1)
    assert m.is_some()
    assert m.get_or_else(0) == 11

    n = Nothing().map(lambda x: x + 1)
    assert n.is_none()
    assert n.get_or_else(42) == 42


def test_find_by_id():
    assert find_by_id(CATS, "c2") == Some(CATS[1])
    assert find_by_id(CATS, "zz").is_none()
    assert resolve_category(CATS, "zz").name == "Uncategorized"


def test_either_left_short_circuits():
    calls = []
    result = Left({"error": "boom"}).map(lambda x: calls.append(x)).bind(lambda x: Right(x))
    assert result.is_left()
    assert result.get_error() == {"error": "boom"}
    assert calls == []
    assert Right(2).bind(lambda x: Right(x * 3)).get_or_else(0) == 6


def test_validate_transaction_ok():
    t = make_tx(splits=(Split("c1", 60), Split("c2", 40)))
    assert validate_transaction(t, ACCS, CATS) == Right(t)


def test_validate_transaction_unknown_account():
    result = validate_transaction(make_tx(account_id="nope"), ACCS, CATS)
    assert result.get_error()["error"] == "account_not_found"


def test_validate_transaction_unknown_category():
    result = validate_transaction(make_tx(category_id="nope"), ACCS, CATS)
    assert result.get_error()["error"] == "category_not_found"

    split = make_tx(splits=(Split("c1", 50), Split("ghost", 50)))
    assert validate_transaction(split, ACCS, CATS).get_error()["category_id"] == "ghost"


def test_validate_transfer_skips_category_check():
    t = make_tx(type="transfer", category_id="", to_account_id="a2")
    assert validate_transaction(t, ACCS, CATS).is_right()


def test_validate_split_mismatch():
    t = make_tx(splits=(Split("c1", 60), Split("c2", 30)))
    error = validate_transaction(t, ACCS, CATS).get_error()
    assert error["error"] == "split_mismatch"
    assert error["difference"] == 10

    close = make_tx(amount=100.004, splits=(Split("c1", 60), Split("c2", 40)))
    assert validate_transaction(close, ACCS, CATS).is_right()


def test_category_allocations():
    assert category_allocations(make_tx()) == (("c1", 100),)
    split = make_tx(splits=(Split("c1", 60), Split("c2", 40)))
    assert category_allocations(split) == (("c1", 60), ("c2", 40))
