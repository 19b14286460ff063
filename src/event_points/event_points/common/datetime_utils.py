from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

_EVENT_TIME_FORMATS = ("%H:%M", "%H:%M:%S", "%I:%M %p", "%I:%M%p", "%I %p")


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD (a trailing time part is ignored) into date."""
    v = (value or "").strip()
    try:
        return datetime.fromisoformat(v).date() if "T" in v else datetime.strptime(v, "%Y-%m-%d").date()
    except ValueError:
        raise ValueError(f"Invalid date: {value!r}") from None


def now_utc() -> datetime:
    """Current UTC time as a naive datetime (the database stores UTC).

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def utc_day_window(day: date) -> tuple[datetime, datetime]:
    """Full UTC calendar-day window [00:00:00.000, 23:59:59.999]."""
    start = datetime.combine(day, time.min)
    end = start + timedelta(days=1) - timedelta(milliseconds=1)
    return start, end


def parse_event_time(value: str) -> Optional[time]:
    """Parse the free-form event time ("10:30 AM", "14:00").

    Returns None when the value does not match any known format.
    """
    v = (value or "").strip().upper()
    for fmt in _EVENT_TIME_FORMATS:
        try:
            return datetime.strptime(v, fmt).time()
        except ValueError:
            continue
    return None


def event_start(event_date: date, event_time: str) -> Optional[datetime]:
    t = parse_event_time(event_time)
    if t is None:
        return None
    return datetime.combine(event_date, t)
