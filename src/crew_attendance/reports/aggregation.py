from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Optional, Sequence

from ..assignments.index import AssignmentIndex
from ..assignments.model import Assignment
from ..attendance.model import AttendanceRecord
from ..common.datetime_utils import month_bounds
from ..common.work_calendar import WorkCalendar
from ..directory.repository import ProjectDirectory


@dataclass(frozen=True)
class MonthlySummary:
    worker_id: int
    year: int
    month: int
    project_id: Optional[int]
    present_days: int
    half_days: int
    absent_days: int
    total_hours: float
    assigned_days: int
    unmarked_days: int
    assigned_from: Optional[date] = None
    assigned_to: Optional[date] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "worker_id": self.worker_id,
            "month": f"{self.year:04d}-{self.month:02d}",
            "project_id": self.project_id,
            "present_days": self.present_days,
            "half_days": self.half_days,
            "absent_days": self.absent_days,
            "total_hours": self.total_hours,
            "assigned_days": self.assigned_days,
            "unmarked_days": self.unmarked_days,
            "assigned_from": self.assigned_from.isoformat() if self.assigned_from else None,
            "assigned_to": self.assigned_to.isoformat() if self.assigned_to else None,
        }


@dataclass(frozen=True)
class ProjectAssignmentSummary:
    project_id: int
    project_name: str
    project_status: str
    client: str
    first_date: Optional[date]
    last_date: Optional[date]
    days_worked: int
    total_hours: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "project_id": self.project_id,
            "project_name": self.project_name,
            "project_status": self.project_status,
            "client": self.client,
            "first_date": self.first_date.isoformat() if self.first_date else None,
            "last_date": self.last_date.isoformat() if self.last_date else None,
            "days_worked": self.days_worked,
            "total_hours": self.total_hours,
        }


def monthly_summary(
    records: Iterable[AttendanceRecord],
    *,
    worker_id: int,
    year: int,
    month: int,
    project_id: Optional[int] = None,
    index: Optional[AssignmentIndex] = None,
    calendar: Optional[WorkCalendar] = None,
) -> MonthlySummary:
    """Counts for one worker and month, optionally narrowed to one project.

    Present counts every present record that is not a half day (custom
    hours included); absent counts explicitly recorded zero-hour absences.
    """

    start, end = month_bounds(year, month)
    rows = [
        r
        for r in records
        if r.worker_id == worker_id
        and start <= r.work_date <= end
        and (project_id is None or r.project_id == project_id)
    ]

    present = sum(1 for r in rows if r.is_present and not r.is_half_day)
    half = sum(1 for r in rows if r.is_half_day)
    absent = sum(1 for r in rows if not r.is_present and not r.is_half_day and r.hours_worked == 0)
    hours = sum(r.hours_worked for r in rows)

    assigned: list[date] = []
    if index is not None:
        assigned = index.assigned_days(worker_id, start, end, project_id=project_id, calendar=calendar)
    marked_days = {r.work_date for r in rows}
    unmarked = sum(1 for d in assigned if d not in marked_days)

    return MonthlySummary(
        worker_id=worker_id,
        year=year,
        month=month,
        project_id=project_id,
        present_days=present,
        half_days=half,
        absent_days=absent,
        total_hours=float(hours),
        assigned_days=len(assigned),
        unmarked_days=unmarked,
        assigned_from=assigned[0] if assigned else None,
        assigned_to=assigned[-1] if assigned else None,
    )


def _explicit_bounds(intervals: Sequence[Assignment]) -> tuple[Optional[date], Optional[date]]:
    starts = [a.assigned_from for a in intervals if a.assigned_from is not None]
    ends = [a.assigned_to for a in intervals if a.assigned_to is not None]
    return (min(starts) if starts else None, max(ends) if ends else None)


def project_assignments(
    records: Iterable[AttendanceRecord],
    assignments: Iterable[Assignment],
    projects: ProjectDirectory,
    *,
    worker_id: int,
) -> list[ProjectAssignmentSummary]:
    """One row per project the worker has attendance on or is assigned to.

    Explicit assignment bounds win over attendance-derived dates. Rows are
    ordered by most recent activity, then by days worked.
    """

    dates_by_project: dict[int, list[date]] = defaultdict(list)
    hours_by_project: dict[int, float] = defaultdict(float)
    for r in records:
        if r.worker_id != worker_id:
            continue
        dates_by_project[r.project_id].append(r.work_date)
        hours_by_project[r.project_id] += r.hours_worked

    intervals_by_project: dict[int, list[Assignment]] = defaultdict(list)
    for a in assignments:
        if a.worker_id == worker_id:
            intervals_by_project[a.project_id].append(a)

    out: list[ProjectAssignmentSummary] = []
    for pid in set(dates_by_project) | set(intervals_by_project):
        dates = sorted(dates_by_project.get(pid, ()))
        assigned_from, assigned_to = _explicit_bounds(intervals_by_project.get(pid, ()))
        project = projects.get_project(pid)
        out.append(
            ProjectAssignmentSummary(
                project_id=pid,
                project_name=project.name if project else "Unknown Project",
                project_status=project.status if project else "",
                client=project.client if project else "",
                first_date=assigned_from or (dates[0] if dates else None),
                last_date=assigned_to or (dates[-1] if dates else None),
                days_worked=len(dates),
                total_hours=float(hours_by_project.get(pid, 0.0)),
            )
        )

    out.sort(key=lambda s: (s.last_date or date.min, s.days_worked, -s.project_id), reverse=True)
    return out
