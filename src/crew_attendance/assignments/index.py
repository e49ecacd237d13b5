from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import DateLike, as_day, iter_days
from ..common.work_calendar import WorkCalendar
from .model import Assignment


class AssignmentIndex:
    """Resolves the assignment windows of a worker per project.

    Several intervals for the same (worker, project) pair are a disjunction:
    a day is assigned when any interval covers it. A pair with no interval
    is never assigned.
    """

    def __init__(self, assignments: Iterable[Assignment] = ()):
        self._by_pair: dict[tuple[int, int], list[Assignment]] = defaultdict(list)
        for a in assignments:
            self._by_pair[(a.worker_id, a.project_id)].append(a)

    def __len__(self) -> int:
        return sum(len(v) for v in self._by_pair.values())

    def all(self) -> list[Assignment]:
        return [a for items in self._by_pair.values() for a in items]

    def intervals(self, worker_id: int, project_id: int) -> Sequence[Assignment]:
        return tuple(self._by_pair.get((worker_id, project_id), ()))

    def is_date_assigned(self, worker_id: int, project_id: int, day: DateLike) -> bool:
        intervals = self._by_pair.get((worker_id, project_id))
        if not intervals:
            return False
        d = as_day(day)
        return any(a.covers(d) for a in intervals)

    def project_ids(self, worker_id: int) -> list[int]:
        return sorted({pid for (wid, pid) in self._by_pair if wid == worker_id})

    def projects_on(self, worker_id: int, day: DateLike) -> list[int]:
        d = as_day(day)
        return [pid for pid in self.project_ids(worker_id) if self.is_date_assigned(worker_id, pid, d)]

    def assigned_days(
        self,
        worker_id: int,
        start: date,
        end: date,
        *,
        project_id: Optional[int] = None,
        calendar: Optional[WorkCalendar] = None,
    ) -> list[date]:
        """Days in ``[start, end]`` covered by an assignment window.

        Without ``project_id`` a day counts when any project covers it.
        """

        project_ids = [project_id] if project_id is not None else self.project_ids(worker_id)
        days = []
        for d in iter_days(start, end):
            if calendar is not None and not calendar.is_counted_day(d):
                continue
            if any(self.is_date_assigned(worker_id, pid, d) for pid in project_ids):
                days.append(d)
        return days
