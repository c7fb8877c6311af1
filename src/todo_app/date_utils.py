# todo_app/date_utils.py

from __future__ import annotations
from datetime import date, datetime, timedelta
from typing import List, Optional

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")


def parse_day(value: Optional[str]) -> Optional[date]:
    """
    Parse an ISO date or datetime string ("2026-10-19", "2026-10-19T09:30")
    into a date. Returns None when the value is missing or unparseable.
    """
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def combine_date_and_time(day: Optional[str], clock: Optional[str]) -> Optional[datetime]:
    """Join a YYYY-MM-DD date and an HH:MM time; date only if the time does not fit."""
    if not day:
        return None
    if clock:
        try:
            return datetime.fromisoformat(f"{day.strip()}T{clock.strip()}")
        except ValueError:
            pass
    parsed = parse_day(day)
    if parsed is None:
        return None
    return datetime(parsed.year, parsed.month, parsed.day)


def weekday_name(d: date) -> str:
    return WEEKDAYS[d.weekday()]


def following_days(start: date, count: int = 3) -> List[str]:
    """ISO dates of the `count` days after `start`."""
    return [(start + timedelta(days=i)).isoformat() for i in range(1, count + 1)]
