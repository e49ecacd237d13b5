from __future__ import annotations

from datetime import date
from typing import Optional

from .enums import RejectionReason


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a referenced worker, project or record does not exist."""


class MarkRejected(ValidationError):
    """A mark was refused before anything was mutated."""

    reason: RejectionReason

    def __init__(self, message: str, *, worker_id: int, project_id: int, work_date: date):
        super().__init__(message)
        self.worker_id = worker_id
        self.project_id = project_id
        self.work_date = work_date


class NotAssignedError(MarkRejected):
    reason = RejectionReason.NOT_ASSIGNED

    def __init__(self, *, worker_id: int, project_id: int, work_date: date):
        super().__init__(
            f"Worker {worker_id} is not assigned to project {project_id} on {work_date.isoformat()}",
            worker_id=worker_id,
            project_id=project_id,
            work_date=work_date,
        )


class DoubleBookedError(MarkRejected):
    reason = RejectionReason.DOUBLE_BOOKED

    def __init__(self, *, worker_id: int, project_id: int, work_date: date, other_project_id: int):
        super().__init__(
            f"Worker {worker_id} is already marked present on project {other_project_id} "
            f"on {work_date.isoformat()}",
            worker_id=worker_id,
            project_id=project_id,
            work_date=work_date,
        )
        self.other_project_id = other_project_id


class RemoteSyncError(DomainError):
    """The remote write failed after an optimistic change; the mirror was rolled back."""

    def __init__(self, message: str, *, record_id: Optional[int] = None):
        super().__init__(message)
        self.record_id = record_id
