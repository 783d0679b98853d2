"""
Helpers for YYYY-MM month keys.
"""

import re
from datetime import date, datetime, timezone
from typing import Optional, Tuple

from src.services.exceptions import InvalidMonth

MONTH_RE = re.compile(r"^(\d{4})-(0[1-9]|1[0-2])$")


def parse_month(month: str) -> Tuple[int, int]:
    """Return (year, month) for a YYYY-MM key or raise InvalidMonth."""
    match = MONTH_RE.match(month or "")
    if not match:
        raise InvalidMonth(f"Month must be in YYYY-MM format, got {month!r}")
    return int(match.group(1)), int(match.group(2))


def current_month(now: Optional[datetime] = None) -> str:
    """Month key for now (UTC)."""
    now = now or datetime.now(timezone.utc)
    return f"{now.year:04d}-{now.month:02d}"


def month_bounds(month: str) -> Tuple[datetime, datetime]:
    """Half-open [start, end) UTC datetimes covering the month."""
    year, mon = parse_month(month)
    start = datetime(year, mon, 1, tzinfo=timezone.utc)
    if mon == 12:
        end = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
    else:
        end = datetime(year, mon + 1, 1, tzinfo=timezone.utc)
    return start, end


def first_two_weeks(month: str) -> Tuple[date, date]:
    """Inclusive date range for days 1-14 of the month."""
    year, mon = parse_month(month)
    return date(year, mon, 1), date(year, mon, 14)
