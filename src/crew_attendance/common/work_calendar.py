from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import FrozenSet, Iterable

from ..core.constants import DEFAULT_COUNT_WEEKENDS
from .datetime_utils import parse_iso_date


@dataclass(frozen=True)
class WorkCalendar:
    """Decides which days count toward assigned-day totals."""

    count_weekends: bool = DEFAULT_COUNT_WEEKENDS
    holidays: FrozenSet[date] = field(default_factory=frozenset)

    def is_counted_day(self, day: date) -> bool:
        if not self.count_weekends and day.weekday() >= 5:
            return False
        return day not in self.holidays

    @classmethod
    def from_settings(cls, *, count_weekends: bool, holidays: Iterable[str]) -> "WorkCalendar":
        parsed = frozenset(parse_iso_date(h.strip()) for h in holidays if h and h.strip())
        return cls(count_weekends=bool(count_weekends), holidays=parsed)
