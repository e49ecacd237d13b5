from __future__ import annotations

from typing import Any, Mapping, Sequence

from ..core.exceptions import NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_number
from .repository import RemoteAttendanceStore

_COLUMNS = "attendance_id, worker_id, project_id, work_date, is_present, is_half_day, hours_worked, status"
_WRITABLE = ("worker_id", "project_id", "work_date", "is_present", "is_half_day", "hours_worked", "status")


def _row(r: Mapping[str, Any]) -> dict[str, Any]:
    row = dict(r)
    row["hours_worked"] = normalize_mysql_number(row.get("hours_worked"))
    return row


class MySQLAttendanceStore(RemoteAttendanceStore):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def query_by_worker(self, worker_id: int) -> Sequence[Mapping[str, Any]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendances
                WHERE worker_id=%s
                ORDER BY work_date, attendance_id
                """,
                (int(worker_id),),
            )
            return [_row(r) for r in fetchall(cur)]

    def _get(self, cur, record_id: int) -> Mapping[str, Any]:
        cur.execute(f"SELECT {_COLUMNS} FROM attendances WHERE attendance_id=%s", (int(record_id),))
        r = fetchone(cur)
        if not r:
            raise NotFoundError(f"Attendance record {record_id} does not exist")
        return _row(r)

    def insert(self, payload: Mapping[str, Any]) -> Mapping[str, Any]:
        values = tuple(payload.get(c) for c in _WRITABLE)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                INSERT INTO attendances({", ".join(_WRITABLE)})
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                values,
            )
            return self._get(cur, int(cur.lastrowid))

    def update_by_id(self, record_id: int, patch: Mapping[str, Any]) -> Mapping[str, Any]:
        columns = [c for c in _WRITABLE if c in patch]
        with db_cursor(self._conn_factory) as (_, cur):
            if columns:
                assignments = ", ".join(f"{c}=%s" for c in columns)
                cur.execute(
                    f"UPDATE attendances SET {assignments} WHERE attendance_id=%s",
                    tuple(patch[c] for c in columns) + (int(record_id),),
                )
            # rowcount is 0 for unchanged rows too, so confirm by reading back.
            return self._get(cur, record_id)

    def delete_by_id(self, record_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendances WHERE attendance_id=%s", (int(record_id),))
