from datetime import date

import pytest

from finance_analytics.constants import DAILY, MONTHLY, WEEKLY
from finance_analytics.domain import Transaction
from finance_analytics.timeseries import bucketize, calculate_cash_flow, calculate_monthly_trends


def make_tx(id, amount, day, type="expense"):
    return Transaction(id, "a1", "c1", type, amount, day)


def test_monthly_buckets():
    trans = (
        make_tx("t1", 100, "2024-01-10"),
        make_tx("t2", 300, "2024-02-05", "income"),
        make_tx("t3", 40, "2024-02-29T21:00:00"),
        make_tx("t4", 999, "2024-03-01"),
    )
    stats = bucketize(trans, "2024-01-01", "2024-02-29", MONTHLY)

    assert [s.period for s in stats] == ["2024-01", "2024-02"]
    jan, feb = stats
    assert jan.expense == 100
    assert jan.transaction_count == 1
    assert jan.average_per_day == pytest.approx(100 / 30)
    assert feb.income == 300
    assert feb.expense == 40
    assert feb.net == 260
    assert feb.start == "2024-02-01"
    assert feb.end == "2024-02-29"


def test_weekly_bucket_average_uses_day_difference():
    trans = (make_tx("t1", 60, "2024-01-03"),)
    stats = bucketize(trans, "2024-01-01", "2024-01-14", WEEKLY)

    assert len(stats) == 2
    assert stats[0].average_per_day == pytest.approx(10)
    assert stats[1].expense == 0


def test_daily_bucket_average_is_the_expense():
    trans = (make_tx("t1", 25, "2024-01-02"), make_tx("t2", 5, "2024-01-02"))
    stats = bucketize(trans, "2024-01-01", "2024-01-03", DAILY)

    assert [s.expense for s in stats] == [0, 30, 0]
    assert stats[1].average_per_day == 30
    assert stats[1].transaction_count == 2


def test_every_dated_transaction_lands_in_exactly_one_bucket():
    trans = tuple(make_tx(f"t{i}", 1, f"2024-03-{i:02d}") for i in range(1, 32))
    trans += (make_tx("bad", 1, "???"),)
    for granularity in (DAILY, WEEKLY, MONTHLY):
        stats = bucketize(trans, "2024-03-01", "2024-03-31", granularity)
        assert sum(s.transaction_count for s in stats) == 31


def test_bucketize_malformed_range_is_empty():
    assert bucketize((make_tx("t1", 5, "2024-01-01"),), "nope", "2024-01-31") == ()


def test_monthly_trends_end_at_current_month():
    trans = (
        make_tx("t1", 1000, "2024-01-15", "income"),
        make_tx("t2", 400, "2024-03-01"),
        make_tx("t3", 50, "2023-12-31"),
    )
    trends = calculate_monthly_trends(trans, months=3, today=date(2024, 3, 15))

    assert [t.month for t in trends] == ["2024-01", "2024-02", "2024-03"]
    assert [t.month_label for t in trends] == ["Jan 2024", "Feb 2024", "Mar 2024"]
    assert trends[0].income == 1000
    assert trends[1].transaction_count == 0
    assert trends[2].net == -400


def test_cash_flow_covers_last_days():
    trans = (
        make_tx("t1", 20, "2024-03-14"),
        make_tx("t2", 100, "2024-03-15", "income"),
        make_tx("t3", 7, "2024-03-10"),
    )
    flow = calculate_cash_flow(trans, days=3, today=date(2024, 3, 15))

    assert [d.date for d in flow] == ["2024-03-13", "2024-03-14", "2024-03-15"]
    assert flow[1].expense == 20
    assert flow[2].net == 100
    assert flow[0].date_label == "Mar 13"
