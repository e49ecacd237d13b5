from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

from ..core.constants import FULL_DAY_HOURS, HALF_DAY_HOURS
from ..core.enums import AttendanceStatus


def status_label(*, is_present: bool, is_half_day: bool, hours_worked: float) -> str:
    """Persisted label derived from the structured fields."""

    if not is_present:
        return "Absent"
    if hours_worked == FULL_DAY_HOURS and not is_half_day:
        return "Present"
    if hours_worked == HALF_DAY_HOURS and is_half_day:
        return "Half Day"
    return f"{hours_worked:g} h"


def classify(*, is_present: bool, is_half_day: bool, hours_worked: float) -> AttendanceStatus:
    if not is_present:
        return AttendanceStatus.ABSENT
    if is_half_day:
        return AttendanceStatus.HALF_DAY
    if hours_worked == FULL_DAY_HOURS:
        return AttendanceStatus.PRESENT
    return AttendanceStatus.CUSTOM


@dataclass(frozen=True)
class AttendanceKey:
    worker_id: int
    work_date: date
    project_id: int


@dataclass(frozen=True)
class MarkState:
    """Desired structured state of a cell; the label always follows the fields."""

    is_present: bool
    is_half_day: bool
    hours_worked: float

    def __post_init__(self):
        # Half day only when present with exactly the half-day hour count.
        half = self.is_present and self.is_half_day and self.hours_worked == HALF_DAY_HOURS
        object.__setattr__(self, "is_half_day", half)
        object.__setattr__(self, "hours_worked", float(self.hours_worked) if self.is_present else 0.0)

    @property
    def status(self) -> str:
        return status_label(is_present=self.is_present, is_half_day=self.is_half_day, hours_worked=self.hours_worked)

    @property
    def kind(self) -> AttendanceStatus:
        return classify(is_present=self.is_present, is_half_day=self.is_half_day, hours_worked=self.hours_worked)


@dataclass(frozen=True)
class AttendanceRecord:
    """Ledger unit of truth: one per (worker, date, project).

    ``record_id`` is ``None`` only for an optimistic insert whose remote
    write has not resolved yet.
    """

    record_id: Optional[int]
    worker_id: int
    project_id: int
    work_date: date
    is_present: bool
    is_half_day: bool
    hours_worked: float
    status: str

    @property
    def key(self) -> AttendanceKey:
        return AttendanceKey(self.worker_id, self.work_date, self.project_id)

    @property
    def kind(self) -> AttendanceStatus:
        return classify(is_present=self.is_present, is_half_day=self.is_half_day, hours_worked=self.hours_worked)

    @property
    def state(self) -> MarkState:
        return MarkState(self.is_present, self.is_half_day, self.hours_worked)

    @classmethod
    def from_state(cls, key: AttendanceKey, state: MarkState, *, record_id: Optional[int] = None) -> "AttendanceRecord":
        return cls(
            record_id=record_id,
            worker_id=key.worker_id,
            project_id=key.project_id,
            work_date=key.work_date,
            is_present=state.is_present,
            is_half_day=state.is_half_day,
            hours_worked=state.hours_worked,
            status=state.status,
        )

    def to_payload(self) -> dict[str, Any]:
        """Fields sent to the remote store (the id travels separately)."""

        return {
            "worker_id": self.worker_id,
            "project_id": self.project_id,
            "work_date": self.work_date,
            "is_present": self.is_present,
            "is_half_day": self.is_half_day,
            "hours_worked": self.hours_worked,
            "status": self.status,
        }


@dataclass(frozen=True)
class CellState:
    """Read model for one calendar cell."""

    work_date: date
    project_id: Optional[int]
    status: AttendanceStatus
    label: Optional[str]
    hours_worked: float
    is_assigned: bool
    record_id: Optional[int] = None
    pending: bool = False
    assigned_project_ids: tuple[int, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.work_date.isoformat(),
            "project_id": self.project_id,
            "status": self.status.value,
            "label": self.label,
            "hours_worked": self.hours_worked,
            "is_assigned": self.is_assigned,
            "record_id": self.record_id,
            "pending": self.pending,
            "assigned_project_ids": list(self.assigned_project_ids),
        }
