from __future__ import annotations

import re
from datetime import date, datetime, timedelta

from ..business_day.model import WallClockTime
from ..core.exceptions import InvalidRangeError, ValidationError

_HM_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime((value or "").strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date {value!r} (expected YYYY-MM-DD)")


def parse_hm(value: str) -> WallClockTime:
    """Parse HH:MM into a wall-clock reading; rejects 24:00 and friends."""
    m = _HM_RE.match((value or "").strip()) if isinstance(value, str) else None
    if not m:
        raise InvalidRangeError(f"Invalid time format {value!r}. Use HH:MM.")
    return WallClockTime(int(m.group(1)), int(m.group(2)))


def week_start_of(day: date) -> date:
    """Sunday that opens the week containing ``day``."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
