from finance_analytics.domain import Transaction
from finance_analytics.insights import (
    busiest_account_insight,
    generate_insights,
    large_expenses_insight,
    savings_insight,
    top_category_insight,
    velocity_insight,
)
from finance_analytics.trends import AccountStatistics, CategoryPerformance, SpendingVelocity


def make_tx(id, amount, type="expense"):
    return Transaction(id, "a1", "c1", type, amount, "2024-01-10")


def velocity(change):
    return SpendingVelocity(10.0, 70.0, 300.0, "stable", change)


def performance(category_id, name, total):
    return CategoryPerformance(
        category_id, name, "🍔", "#fff", total, 1, total, total, total, "2024-01-10", "stable", 0.0
    )


def account(account_id, name, count):
    return AccountStatistics(account_id, name, 0.0, 0.0, 0.0, count, 0.0, 0.0, None)


def test_velocity_insight_thresholds():
    assert "increased by 12.5%" in velocity_insight((), velocity(12.5), (), ())
    assert velocity_insight((), velocity(-20), (), ()) == "Great! Your spending has decreased by 20.0%"
    assert velocity_insight((), velocity(10), (), ()) is None


def test_top_category_insight():
    perf = (performance("c1", "Food", 60), performance("c2", "Fun", 40))
    assert top_category_insight((), velocity(0), perf, ()) == "Food accounts for 60.0% of your spending"

    even = (performance("c1", "Food", 40), performance("c2", "Fun", 30), performance("c3", "Rent", 30))
    assert top_category_insight((), velocity(0), even, ()) is None
    assert top_category_insight((), velocity(0), (), ()) is None


def test_busiest_account_needs_two_accounts():
    stats = (account("a1", "Checking", 7), account("a2", "Cash", 2))
    assert busiest_account_insight((), velocity(0), (), stats) == "Most transactions (7) are from Checking"
    assert busiest_account_insight((), velocity(0), (), stats[:1]) is None


def test_large_expenses_insight_pluralizes():
    trans = (make_tx("t1", 10), make_tx("t2", 10), make_tx("t3", 10), make_tx("t4", 100))
    assert large_expenses_insight(trans, velocity(0), (), ()) == "You have 1 large transaction above average"

    trans += tuple(make_tx(f"s{i}", 1) for i in range(20)) + (make_tx("t5", 100),)
    assert large_expenses_insight(trans, velocity(0), (), ()) == "You have 2 large transactions above average"


def test_savings_insight():
    good = (make_tx("i", 1000, "income"), make_tx("e", 500))
    bad = (make_tx("i", 100, "income"), make_tx("e", 500))
    ok = (make_tx("i", 100, "income"), make_tx("e", 90))

    assert savings_insight(good, velocity(0), (), ()) == "Excellent! You're saving 50.0% of your income"
    assert "spending more than you earn" in savings_insight(bad, velocity(0), (), ())
    assert savings_insight(ok, velocity(0), (), ()) is None
    assert savings_insight((make_tx("e", 5),), velocity(0), (), ()) is None


def test_generate_insights_in_priority_order():
    trans = (make_tx("i", 1000, "income"), make_tx("e", 100))
    perf = (performance("c1", "Food", 100),)
    stats = (account("a1", "Checking", 2), account("a2", "Cash", 1))

    insights = generate_insights(trans, velocity(50), perf, stats)

    assert len(insights) == 4
    assert insights[0].startswith("Your spending has increased")
    assert insights[1].startswith("Food accounts for")
    assert insights[2].startswith("Most transactions")
    assert insights[3].startswith("Excellent!")


def test_generate_insights_is_capped_at_five():
    rules = tuple((lambda n: lambda *args: f"rule {n}")(n) for n in range(8))
    insights = generate_insights((), velocity(0), (), (), rules=rules)
    assert insights == ("rule 0", "rule 1", "rule 2", "rule 3", "rule 4")
