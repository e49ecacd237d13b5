from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class Assignment:
    """Links a worker to a project for an open or closed date interval.

    ``assigned_from=None`` means open-started, ``assigned_to=None`` means
    open-ended. Bounds are inclusive and day-granular.
    """

    assignment_id: int
    worker_id: int
    project_id: int
    assigned_from: Optional[date] = None
    assigned_to: Optional[date] = None
    role: str = ""
    notes: str = ""

    def covers(self, day: date) -> bool:
        if self.assigned_from is not None and day < self.assigned_from:
            return False
        if self.assigned_to is not None and day > self.assigned_to:
            return False
        return True

    def overlaps(self, start: date, end: date) -> bool:
        if self.assigned_from is not None and self.assigned_from > end:
            return False
        if self.assigned_to is not None and self.assigned_to < start:
            return False
        return True
