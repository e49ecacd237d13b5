from __future__ import annotations

import logging
import threading
from dataclasses import replace
from datetime import date
from typing import Callable, Optional

from ..core.exceptions import NotFoundError, ValidationError
from .legacy import normalize_record
from .model import AttendanceKey, AttendanceRecord
from .repository import RemoteAttendanceStore

logger = logging.getLogger(__name__)


class AttendanceLedger:
    """Canonical attendance records of one worker scope.

    The remote store owns the rows; the ledger keeps an in-memory mirror of
    the selected worker's rows that optimistic writes mutate before the
    remote round-trip resolves. Nothing outside the ledger touches the
    mirror.
    """

    def __init__(self, store: RemoteAttendanceStore):
        self._store = store
        self._lock = threading.RLock()
        self._worker_id: Optional[int] = None
        self._mirror: dict[AttendanceKey, AttendanceRecord] = {}

    @property
    def worker_id(self) -> Optional[int]:
        return self._worker_id

    def load(self, worker_id: int) -> int:
        """Fetch the worker's rows and replace the mirror wholesale."""

        records = self._fetch(worker_id)
        mirror: dict[AttendanceKey, AttendanceRecord] = {}
        for rec in records:
            if rec.key in mirror:
                logger.warning(
                    "Duplicate attendance rows for worker=%s date=%s project=%s (keeping id=%s, ignoring id=%s)",
                    rec.worker_id, rec.work_date, rec.project_id, mirror[rec.key].record_id, rec.record_id,
                )
                continue
            mirror[rec.key] = rec

        with self._lock:
            self._worker_id = int(worker_id)
            self._mirror = mirror
        logger.info("Loaded %d attendance records for worker %s", len(mirror), worker_id)
        return len(mirror)

    def _fetch(self, worker_id: int) -> list[AttendanceRecord]:
        rows = self._store.query_by_worker(int(worker_id))
        records = [normalize_record(r) for r in rows]
        return [r for r in records if r.worker_id == int(worker_id)]

    def _require_scope(self, worker_id: int) -> None:
        if self._worker_id is None or int(worker_id) != self._worker_id:
            raise ValidationError(f"Worker {worker_id} is not the loaded worker")

    def get(self, worker_id: int, work_date: date, project_id: int) -> Optional[AttendanceRecord]:
        with self._lock:
            return self._mirror.get(AttendanceKey(int(worker_id), work_date, int(project_id)))

    def records(
        self,
        *,
        project_id: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[AttendanceRecord]:
        with self._lock:
            items = list(self._mirror.values())
        if project_id is not None:
            items = [r for r in items if r.project_id == project_id]
        if start is not None:
            items = [r for r in items if r.work_date >= start]
        if end is not None:
            items = [r for r in items if r.work_date <= end]
        items.sort(key=lambda r: (r.work_date, r.project_id))
        return items

    def records_on(self, worker_id: int, work_date: date) -> list[AttendanceRecord]:
        with self._lock:
            return [r for k, r in self._mirror.items() if k.worker_id == worker_id and k.work_date == work_date]

    def mirror_upsert(self, record: AttendanceRecord) -> AttendanceRecord:
        """Insert or update the mirror entry for the record's triple.

        An existing entry keeps its id when the incoming record has none.
        """

        with self._lock:
            self._require_scope(record.worker_id)
            existing = self._mirror.get(record.key)
            if existing is not None and record.record_id is None and existing.record_id is not None:
                record = replace(record, record_id=existing.record_id)
            self._mirror[record.key] = record
            return record

    def reserve(
        self,
        key: AttendanceKey,
        build: Callable[[Optional[AttendanceRecord]], AttendanceRecord],
        check: Callable[[], None],
    ) -> tuple[Optional[AttendanceRecord], AttendanceRecord]:
        """Run ``check`` and write the optimistic record as one step.

        Marks for the same worker and day on other projects see the
        reserved row before they run their own check. Returns the previous
        entry (for rollback) and the record now in the mirror.
        """

        with self._lock:
            check()
            before = self._mirror.get(key)
            return before, self.mirror_upsert(build(before))

    def mirror_delete(self, key: AttendanceKey) -> Optional[AttendanceRecord]:
        with self._lock:
            self._require_scope(key.worker_id)
            return self._mirror.pop(key, None)

    def adopt(self, record: AttendanceRecord) -> None:
        """Replace the triple with the row the store committed."""

        with self._lock:
            if self._worker_id == record.worker_id:
                self._mirror[record.key] = record

    def restore(self, key: AttendanceKey, snapshot: Optional[AttendanceRecord]) -> None:
        """Put the triple back to ``snapshot`` after a failed remote write."""

        with self._lock:
            if self._worker_id != key.worker_id:
                # The scope was reloaded meanwhile; the fresh mirror wins.
                return
            if snapshot is None:
                self._mirror.pop(key, None)
            else:
                self._mirror[key] = snapshot

    def remote_find(self, key: AttendanceKey) -> Optional[AttendanceRecord]:
        for rec in self._fetch(key.worker_id):
            if rec.key == key and rec.record_id is not None:
                return rec
        return None

    def remote_upsert(self, record: AttendanceRecord) -> AttendanceRecord:
        """Persist the record and return what the store committed.

        A known id is updated directly; if that row was deleted elsewhere the
        record is saved as if it had no id. Otherwise the store is queried for
        the exact triple first so a row created concurrently elsewhere is
        updated instead of duplicated.
        """

        payload = record.to_payload()
        if record.record_id is not None:
            try:
                return normalize_record(self._store.update_by_id(record.record_id, payload))
            except NotFoundError:
                logger.warning(
                    "Attendance row %s is gone from the store; saving worker=%s date=%s project=%s again",
                    record.record_id, record.worker_id, record.work_date, record.project_id,
                )

        match = self.remote_find(record.key)
        if match is not None:
            row = self._store.update_by_id(match.record_id, payload)
        else:
            row = self._store.insert(payload)
        return normalize_record(row)

    def remote_delete(self, record_id: int) -> None:
        self._store.delete_by_id(int(record_id))
