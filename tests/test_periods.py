from datetime import date, datetime, timedelta

import pytest

from finance_analytics.constants import DAILY, MONTHLY, WEEKLY
from finance_analytics.periods import (
    add_months,
    day_label,
    end_of_day,
    iter_periods,
    month_label,
    parse_date,
    parse_day,
    shift_years,
    weekday_name,
)


def test_parse_date_accepts_dates_and_datetimes():
    assert parse_date("2024-03-05") == datetime(2024, 3, 5)
    assert parse_date("2024-03-05T10:30:00") == datetime(2024, 3, 5, 10, 30)
    assert parse_date(date(2024, 3, 5)) == datetime(2024, 3, 5)


def test_parse_date_drops_timezone():
    assert parse_date("2024-03-05T10:30:00Z") == datetime(2024, 3, 5, 10, 30)


@pytest.mark.parametrize("value", [None, "", "not-a-date", "2024-13-45"])
def test_parse_date_malformed_is_none(value):
    assert parse_date(value) is None
    assert parse_day(value) is None


def test_end_of_day_is_last_millisecond():
    assert end_of_day(date(2024, 1, 1)) == datetime(2024, 1, 1, 23, 59, 59, 999000)


def test_add_months_clamps_to_month_end():
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months(date(2024, 3, 31), -1) == date(2024, 2, 29)
    assert add_months(date(2024, 11, 15), 3) == date(2025, 2, 15)


def test_shift_years_clamps_leap_day():
    assert shift_years(date(2024, 2, 29), -1) == date(2023, 2, 28)
    assert shift_years(date(2023, 6, 1), 1) == date(2024, 6, 1)


def test_labels():
    assert day_label(date(2024, 1, 5)) == "Jan 5"
    assert month_label(date(2024, 1, 5)) == "Jan 2024"
    assert weekday_name(date(2024, 1, 7)) == "Sunday"
    assert weekday_name(date(2024, 1, 8)) == "Monday"


def test_monthly_periods_clip_to_range():
    periods = list(iter_periods("2024-01-15", "2024-03-10", MONTHLY))

    assert [p.key for p in periods] == ["2024-01", "2024-02", "2024-03"]
    assert periods[0].start == date(2024, 1, 15)
    assert periods[0].end == date(2024, 1, 31)
    assert periods[1].start == date(2024, 2, 1)
    assert periods[1].end == date(2024, 2, 29)
    assert periods[2].end == date(2024, 3, 10)
    assert periods[0].label == "Jan 2024"


def test_weekly_periods_keys_and_labels():
    periods = list(iter_periods("2024-01-01", "2024-01-20", WEEKLY))

    assert len(periods) == 3
    assert periods[0].key == "2024-01-01_2024-01-07"
    assert periods[0].label == "Jan 1 - Jan 7"
    assert periods[2].start == date(2024, 1, 15)
    assert periods[2].end == date(2024, 1, 20)


def test_daily_periods():
    periods = list(iter_periods("2024-02-27", "2024-03-01", DAILY))
    assert [p.key for p in periods] == ["2024-02-27", "2024-02-28", "2024-02-29", "2024-03-01"]
    assert all(p.start == p.end for p in periods)


@pytest.mark.parametrize("granularity", [DAILY, WEEKLY, MONTHLY])
@pytest.mark.parametrize("start,end", [
    ("2024-01-01", "2024-12-31"),
    ("2024-01-31", "2024-04-02"),
    ("2023-12-20", "2024-01-05"),
    ("2024-05-05", "2024-05-05"),
])
def test_periods_are_gapless_and_cover_the_range(granularity, start, end):
    periods = list(iter_periods(start, end, granularity))

    assert periods[0].start == parse_day(start)
    assert periods[-1].end == parse_day(end)
    for prev, nxt in zip(periods, periods[1:]):
        assert nxt.start == prev.end + timedelta(days=1)
    assert all(p.start <= p.end for p in periods)


def test_unknown_granularity_raises():
    with pytest.raises(ValueError):
        list(iter_periods("2024-01-01", "2024-01-31", "hourly"))


def test_malformed_or_inverted_range_is_empty():
    assert list(iter_periods("garbage", "2024-01-31", MONTHLY)) == []
    assert list(iter_periods("2024-02-01", "2024-01-31", DAILY)) == []
