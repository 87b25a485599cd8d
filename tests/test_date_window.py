from datetime import date, datetime, timedelta

import pytest

from scrapers.date_window import DateWindow, previous_week


def test_midweek_returns_previous_monday_to_sunday():
    window = previous_week(date(2024, 3, 13))  # Wednesday
    assert window == DateWindow(start_date="2024-03-04", end_date="2024-03-10")


def test_sunday_closes_its_own_week():
    window = previous_week(date(2024, 3, 10))
    assert window == DateWindow(start_date="2024-03-04", end_date="2024-03-10")


def test_monday_returns_week_ending_yesterday():
    window = previous_week(date(2024, 3, 11))
    assert window.end_date == "2024-03-10"


def test_window_crossing_year_boundary():
    window = previous_week(date(2025, 1, 2))  # Thursday
    assert window == DateWindow(start_date="2024-12-23", end_date="2024-12-29")


def test_accepts_datetime():
    window = previous_week(datetime(2024, 3, 13, 23, 59, 59))
    assert window.end_date == "2024-03-10"


@pytest.mark.parametrize("offset", range(0, 60))
def test_always_monday_to_sunday(offset):
    today = date(2024, 2, 1) + timedelta(days=offset)
    window = previous_week(today)
    start = date.fromisoformat(window.start_date)
    end = date.fromisoformat(window.end_date)

    assert start.weekday() == 0
    assert end.weekday() == 6
    assert (end - start).days == 6
    assert 0 <= (today - end).days <= 6
    if today.weekday() == 6:
        assert end == today


def test_filter_range_and_storage_key():
    window = DateWindow(start_date="2024-03-04", end_date="2024-03-10")
    assert window.filter_range == "2024-03-04 12:00 AM - 2024-03-10 11:59 PM"
    assert window.storage_key == "atlas_exports/2024-03-04_to_2024-03-10_transactions.csv"


def test_window_is_immutable():
    window = previous_week(date(2024, 3, 13))
    with pytest.raises(AttributeError):
        window.start_date = "2024-01-01"
