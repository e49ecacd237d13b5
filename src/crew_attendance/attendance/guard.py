from __future__ import annotations

import logging
from datetime import date

from ..assignments.index import AssignmentIndex
from ..core.exceptions import DoubleBookedError, NotAssignedError
from .ledger import AttendanceLedger

logger = logging.getLogger(__name__)


class ConflictGuard:
    """Validates a proposed mark against the current mirror.

    Checks run in order: the day must fall in an assignment window for the
    project, then no other project may already hold a present record for
    the same worker and day. Callers re-run it right before every write.
    """

    def __init__(self, ledger: AttendanceLedger, index_provider):
        self._ledger = ledger
        # Callable returning the current AssignmentIndex, reloaded per worker.
        self._index_provider = index_provider

    @property
    def index(self) -> AssignmentIndex:
        return self._index_provider()

    def validate_mark(self, worker_id: int, work_date: date, project_id: int) -> None:
        if not self.index.is_date_assigned(worker_id, project_id, work_date):
            logger.info("Rejected mark: worker %s not assigned to project %s on %s", worker_id, project_id, work_date)
            raise NotAssignedError(worker_id=worker_id, project_id=project_id, work_date=work_date)

        for other in self._ledger.records_on(worker_id, work_date):
            if other.project_id != project_id and other.is_present:
                logger.info(
                    "Rejected mark: worker %s already present on project %s on %s",
                    worker_id, other.project_id, work_date,
                )
                raise DoubleBookedError(
                    worker_id=worker_id,
                    project_id=project_id,
                    work_date=work_date,
                    other_project_id=other.project_id,
                )
