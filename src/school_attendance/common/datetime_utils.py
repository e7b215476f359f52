from __future__ import annotations

import calendar
from datetime import date, datetime
from typing import Tuple, Union

from ..core.constants import DAY_NAMES
from ..core.exceptions import ValidationError

YearMonth = Union[str, date, Tuple[int, int]]


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def iso_date(value: date) -> str:
    return value.strftime("%Y-%m-%d")


def day_name(value: date) -> str:
    """Weekday name as stored on schedule slots (`hari`)."""
    return DAY_NAMES[value.weekday()]


def month_range(year_month: YearMonth) -> tuple[date, date]:
    """First and last calendar day of a month.

    Accepts "YYYY-MM", any date inside the month, or a (year, month) tuple.
    """
    if isinstance(year_month, datetime):
        year, month = year_month.year, year_month.month
    elif isinstance(year_month, date):
        year, month = year_month.year, year_month.month
    elif isinstance(year_month, tuple) and len(year_month) == 2:
        year, month = year_month
    elif isinstance(year_month, str):
        try:
            parsed = datetime.strptime(year_month.strip(), "%Y-%m")
        except ValueError:
            raise ValidationError(f"Invalid month: {year_month!r}") from None
        year, month = parsed.year, parsed.month
    else:
        raise ValidationError(f"Invalid month: {year_month!r}")

    try:
        last_day = calendar.monthrange(int(year), int(month))[1]
        return date(int(year), int(month), 1), date(int(year), int(month), last_day)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid month: {year_month!r}") from None


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mock easier.
    """
    return datetime.now()
