from __future__ import annotations

import calendar
from datetime import date, datetime, timezone
from typing import Optional

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_optional_date(value: Optional[str], field_name: str) -> Optional[date]:
    """Parse an optional query/body date; blank means absent."""
    v = str(value or "").strip()
    if not v:
        return None
    try:
        return parse_iso_date(v)
    except ValueError:
        raise ValidationError(f"{field_name} must be a date in YYYY-MM-DD format", code="invalid_date")


def format_date(value: Optional[date]) -> Optional[str]:
    return value.strftime("%Y-%m-%d") if value else None


def describe_date(value: date) -> str:
    """Human form used in user-facing messages, e.g. 'Mon Mar 10 2025'."""
    return value.strftime("%a %b %d %Y")


def add_months(value: date, months: int) -> date:
    """Shift by whole months, clamping the day to the target month's length."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def today_local() -> date:
    """Current local date; services also accept an explicit `today`."""
    return date.today()


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
