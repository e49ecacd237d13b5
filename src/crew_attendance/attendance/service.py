from __future__ import annotations

import logging
import threading
from typing import Optional

from ..assignments.index import AssignmentIndex
from ..assignments.repository import AssignmentDirectory
from ..common.datetime_utils import DateLike, as_day, iter_days, month_bounds
from ..common.validators import require_positive_id
from ..common.work_calendar import WorkCalendar
from ..core.enums import AttendanceStatus, MarkAction
from ..core.exceptions import NotFoundError, ValidationError
from ..directory.model import Worker
from ..directory.repository import ProjectDirectory, WorkerDirectory
from ..reports.aggregation import MonthlySummary, ProjectAssignmentSummary, monthly_summary, project_assignments
from . import status_cycle
from .guard import ConflictGuard
from .ledger import AttendanceLedger
from .model import AttendanceKey, AttendanceRecord, CellState, MarkState
from .repository import RemoteAttendanceStore
from .sync import OptimisticSyncController

logger = logging.getLogger(__name__)


class AttendanceBoard:
    """Attendance calendar of one selected worker.

    Interaction state such as the displayed month or project filter stays
    with the caller and is passed into every call.
    """

    def __init__(
        self,
        workers: WorkerDirectory,
        projects: ProjectDirectory,
        assignments: AssignmentDirectory,
        store: RemoteAttendanceStore,
        *,
        calendar: Optional[WorkCalendar] = None,
    ):
        self._workers = workers
        self._projects = projects
        self._assignments = assignments
        self._calendar = calendar or WorkCalendar()
        self._ledger = AttendanceLedger(store)
        self._index = AssignmentIndex()
        self._worker: Optional[Worker] = None
        self._guard = ConflictGuard(self._ledger, lambda: self._index)
        self._sync = OptimisticSyncController(self._ledger, self._guard, on_committed=self._invalidate)
        self._summary_lock = threading.Lock()
        self._project_summary: Optional[list[ProjectAssignmentSummary]] = None

    @property
    def worker(self) -> Optional[Worker]:
        return self._worker

    @property
    def ledger(self) -> AttendanceLedger:
        return self._ledger

    @property
    def index(self) -> AssignmentIndex:
        return self._index

    def _require_worker(self) -> Worker:
        if self._worker is None:
            raise ValidationError("No worker selected")
        return self._worker

    def _invalidate(self, _key: Optional[AttendanceKey] = None) -> None:
        with self._summary_lock:
            self._project_summary = None

    def select_worker(self, worker_id: int) -> Worker:
        """(Re)load assignments and attendance scoped to one worker."""

        worker_id = require_positive_id(worker_id, "worker_id")
        worker = self._workers.get_worker(worker_id)
        if worker is None:
            raise NotFoundError(f"Worker {worker_id} does not exist")

        index = AssignmentIndex(self._assignments.list_assignments(worker_id))
        self._ledger.load(worker_id)
        self._index = index
        self._worker = worker
        self._invalidate()
        logger.info("Selected worker %s (%d assignment intervals)", worker_id, len(index))
        return worker

    def mark(self, day: DateLike, desired: MarkState, *, project_id: int) -> AttendanceRecord:
        worker = self._require_worker()
        project_id = require_positive_id(project_id, "project_id")
        return self._sync.apply_mark(worker.worker_id, as_day(day), project_id, desired)

    def toggle(self, day: DateLike, *, project_id: int) -> AttendanceRecord:
        """Quick single-action cycle: Empty -> Full -> Half -> Absent -> Full."""

        worker = self._require_worker()
        project_id = require_positive_id(project_id, "project_id")
        return self._sync.apply_mark(worker.worker_id, as_day(day), project_id, status_cycle.next_state)

    def apply_action(
        self,
        day: DateLike,
        action: MarkAction,
        *,
        project_id: int,
        hours=None,
    ) -> Optional[AttendanceRecord]:
        """Explicit per-status actions; returns ``None`` when nothing is left recorded."""

        if action == MarkAction.CLEAR:
            self.clear_mark(day, project_id=project_id)
            return None
        if action == MarkAction.TOGGLE:
            return self.toggle(day, project_id=project_id)
        return self.mark(day, status_cycle.state_for_action(action, hours=hours), project_id=project_id)

    def clear_mark(self, day: DateLike, *, project_id: int) -> Optional[AttendanceRecord]:
        worker = self._require_worker()
        project_id = require_positive_id(project_id, "project_id")
        return self._sync.apply_clear(worker.worker_id, as_day(day), project_id)

    def get_cell_state(self, day: DateLike, *, project_id: Optional[int] = None) -> CellState:
        worker = self._require_worker()
        d = as_day(day)
        assigned_projects = tuple(self._index.projects_on(worker.worker_id, d))

        if project_id is None:
            present = [r for r in self._ledger.records_on(worker.worker_id, d) if r.is_present]
            return CellState(
                work_date=d,
                project_id=None,
                status=present[0].kind if present else AttendanceStatus.EMPTY,
                label=present[0].status if present else None,
                hours_worked=sum(r.hours_worked for r in present),
                is_assigned=bool(assigned_projects),
                assigned_project_ids=assigned_projects,
            )

        record = self._ledger.get(worker.worker_id, d, project_id)
        key = AttendanceKey(worker.worker_id, d, int(project_id))
        return CellState(
            work_date=d,
            project_id=int(project_id),
            status=record.kind if record else AttendanceStatus.EMPTY,
            label=record.status if record else None,
            hours_worked=record.hours_worked if record else 0.0,
            is_assigned=self._index.is_date_assigned(worker.worker_id, int(project_id), d),
            record_id=record.record_id if record else None,
            pending=self._sync.is_pending(key),
            assigned_project_ids=assigned_projects,
        )

    def get_month_cells(self, year: int, month: int, *, project_id: Optional[int] = None) -> list[CellState]:
        start, end = month_bounds(year, month)
        return [self.get_cell_state(d, project_id=project_id) for d in iter_days(start, end)]

    def get_monthly_summary(self, year: int, month: int, *, project_id: Optional[int] = None) -> MonthlySummary:
        worker = self._require_worker()
        return monthly_summary(
            self._ledger.records(),
            worker_id=worker.worker_id,
            year=year,
            month=month,
            project_id=project_id,
            index=self._index,
            calendar=self._calendar,
        )

    def get_project_assignments(self) -> list[ProjectAssignmentSummary]:
        worker = self._require_worker()
        with self._summary_lock:
            cached = self._project_summary
        if cached is not None:
            return list(cached)

        summary = project_assignments(
            self._ledger.records(),
            self._index.all(),
            self._projects,
            worker_id=worker.worker_id,
        )
        with self._summary_lock:
            self._project_summary = summary
        return list(summary)

    def default_project_id(self) -> Optional[int]:
        """Most recently active project, used to preselect the project filter."""

        summary = self.get_project_assignments()
        return summary[0].project_id if summary else None


class AttendanceBoardRegistry:
    """Hands out one board per worker for the HTTP layer."""

    def __init__(
        self,
        workers: WorkerDirectory,
        projects: ProjectDirectory,
        assignments: AssignmentDirectory,
        store: RemoteAttendanceStore,
        *,
        calendar: Optional[WorkCalendar] = None,
    ):
        self._workers = workers
        self._projects = projects
        self._assignments = assignments
        self._store = store
        self._calendar = calendar
        self._lock = threading.Lock()
        self._boards: dict[int, AttendanceBoard] = {}

    def board_for(self, worker_id: int, *, reload: bool = False) -> AttendanceBoard:
        worker_id = require_positive_id(worker_id, "worker_id")
        with self._lock:
            board = self._boards.get(worker_id)
            if board is None:
                board = AttendanceBoard(
                    self._workers, self._projects, self._assignments, self._store, calendar=self._calendar
                )
                board.select_worker(worker_id)
                self._boards[worker_id] = board
                return board
        if reload:
            board.select_worker(worker_id)
        return board
