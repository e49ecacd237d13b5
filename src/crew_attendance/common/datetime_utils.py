from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from typing import Iterator, Union

from ..core.exceptions import ValidationError

DateLike = Union[date, datetime, str]


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid date: {value!r}") from exc


def parse_month(value: str) -> tuple[int, int]:
    """Parse YYYY-MM string into (year, month)."""
    try:
        parsed = datetime.strptime(value, "%Y-%m")
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid month: {value!r}") from exc
    return parsed.year, parsed.month


def as_day(value: DateLike) -> date:
    """Strip the time-of-day component.

    Stored dates arrive as ``date``, ``datetime`` or strings such as
    ``"2025-01-15"``, ``"2025-01-15T00:00:00"`` or the padded
    ``"2025 -01 -15 "`` written by older clients.
    """

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        compact = "".join(value.split())
        return parse_iso_date(compact[:10])
    raise ValidationError(f"Unsupported date value: {value!r}")


def month_bounds(year: int, month: int) -> tuple[date, date]:
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


def iter_days(start: date, end: date) -> Iterator[date]:
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def today() -> date:
    """Current local date.

    Note: Wrapped so tests can patch it.
    """
    return date.today()
