from __future__ import annotations

from datetime import date, datetime, time

import pytest

from src.event_points.event_points.common.datetime_utils import (
    event_start,
    parse_event_time,
    parse_iso_date,
    utc_day_window,
)


def test_utc_day_window_covers_whole_day():
    start, end = utc_day_window(date(2026, 3, 10))

    assert start == datetime(2026, 3, 10, 0, 0, 0)
    assert end == datetime(2026, 3, 10, 23, 59, 59, 999000)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("14:00", time(14, 0)),
        ("09:05:30", time(9, 5, 30)),
        ("10:30 AM", time(10, 30)),
        ("7:15pm", time(19, 15)),
        ("8 PM", time(20, 0)),
    ],
)
def test_parse_event_time(raw, expected):
    assert parse_event_time(raw) == expected


@pytest.mark.parametrize("raw", ["", "noon", "25:00", None])
def test_parse_event_time_rejects(raw):
    assert parse_event_time(raw) is None


def test_event_start_combines_date_and_time():
    assert event_start(date(2026, 3, 10), "6:45 PM") == datetime(2026, 3, 10, 18, 45)
    assert event_start(date(2026, 3, 10), "whenever") is None


def test_parse_iso_date():
    assert parse_iso_date("2026-03-10") == date(2026, 3, 10)
    assert parse_iso_date("2026-03-10T15:00:00") == date(2026, 3, 10)
    with pytest.raises(ValueError):
        parse_iso_date("10.03.2026")
