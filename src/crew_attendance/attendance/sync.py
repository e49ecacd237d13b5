from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from datetime import date
from typing import Callable, Iterator, Optional, Union

from ..core.exceptions import RemoteSyncError
from .guard import ConflictGuard
from .ledger import AttendanceLedger
from .model import AttendanceKey, AttendanceRecord, MarkState

logger = logging.getLogger(__name__)

StateResolver = Callable[[Optional[AttendanceRecord]], MarkState]


class KeyedLocks:
    """One lock per attendance triple; different triples never block each other."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[AttendanceKey, threading.Lock] = {}
        self._waiters: dict[AttendanceKey, int] = {}

    @contextmanager
    def hold(self, key: AttendanceKey) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
            self._waiters[key] = self._waiters.get(key, 0) + 1
        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                self._waiters[key] -= 1
                if self._waiters[key] == 0:
                    del self._waiters[key]
                    del self._locks[key]

    def is_held(self, key: AttendanceKey) -> bool:
        with self._guard:
            return key in self._waiters


class OptimisticSyncController:
    """Applies marks to the mirror first, then to the remote store.

    Writes to the same triple are serialized: a second request waits for the
    outstanding one to commit or roll back before the guard runs again. The
    guard and the optimistic write run under the ledger lock, so marks on
    other projects of the same day are checked against it. A failed remote
    write restores the exact pre-write snapshot.
    """

    def __init__(
        self,
        ledger: AttendanceLedger,
        guard: ConflictGuard,
        *,
        on_committed: Optional[Callable[[AttendanceKey], None]] = None,
    ):
        self._ledger = ledger
        self._guard = guard
        self._locks = KeyedLocks()
        self._on_committed = on_committed

    def is_pending(self, key: AttendanceKey) -> bool:
        return self._locks.is_held(key)

    def apply_mark(
        self,
        worker_id: int,
        work_date: date,
        project_id: int,
        desired: Union[MarkState, StateResolver],
    ) -> AttendanceRecord:
        """Single mutation entry point for explicit marks and toggles.

        ``desired`` is either the target state or a function of the current
        record, resolved only once the triple's previous write has settled.
        """

        key = AttendanceKey(int(worker_id), work_date, int(project_id))

        def build(current: Optional[AttendanceRecord]) -> AttendanceRecord:
            state = desired(current) if callable(desired) else desired
            return AttendanceRecord.from_state(key, state, record_id=current.record_id if current is not None else None)

        with self._locks.hold(key):
            before, optimistic = self._ledger.reserve(
                key,
                build,
                lambda: self._guard.validate_mark(key.worker_id, key.work_date, key.project_id),
            )

            try:
                committed = self._ledger.remote_upsert(optimistic)
            except Exception as exc:
                self._ledger.restore(key, before)
                logger.warning(
                    "Attendance sync failed for worker=%s date=%s project=%s; reverted",
                    key.worker_id, key.work_date, key.project_id, exc_info=True,
                )
                raise RemoteSyncError(
                    "Failed to sync attendance with the database. The change was reverted.",
                    record_id=optimistic.record_id,
                ) from exc

            # Adopt the committed row so later writes can update it by id.
            self._ledger.adopt(committed)
        self._notify(key)
        return committed

    def apply_clear(self, worker_id: int, work_date: date, project_id: int) -> Optional[AttendanceRecord]:
        """Remove the triple's record. Clearing an unmarked day is a no-op."""

        key = AttendanceKey(int(worker_id), work_date, int(project_id))
        with self._locks.hold(key):
            removed = self._ledger.mirror_delete(key)
            if removed is None:
                return None
            try:
                self._ledger.remote_delete(removed.record_id)
            except Exception as exc:
                self._ledger.restore(key, removed)
                logger.warning(
                    "Attendance clear failed for worker=%s date=%s project=%s; reverted",
                    key.worker_id, key.work_date, key.project_id, exc_info=True,
                )
                raise RemoteSyncError(
                    "Failed to clear attendance in the database. The change was reverted.",
                    record_id=removed.record_id,
                ) from exc
        self._notify(key)
        return removed

    def _notify(self, key: AttendanceKey) -> None:
        if self._on_committed is not None:
            self._on_committed(key)
