from __future__ import annotations

from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, normalize_mysql_date
from .model import Assignment
from .repository import AssignmentDirectory


class MySQLAssignmentDirectory(AssignmentDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_assignments(self, worker_id: int) -> Sequence[Assignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT assignment_id, worker_id, project_id, assigned_from, assigned_to, role, notes
                FROM project_workers
                WHERE worker_id=%s
                ORDER BY assignment_id
                """,
                (int(worker_id),),
            )
            rows = fetchall(cur)
            return [
                Assignment(
                    assignment_id=int(r["assignment_id"]),
                    worker_id=int(r["worker_id"]),
                    project_id=int(r["project_id"]),
                    assigned_from=normalize_mysql_date(r.get("assigned_from")),
                    assigned_to=normalize_mysql_date(r.get("assigned_to")),
                    role=r.get("role") or "",
                    notes=r.get("notes") or "",
                )
                for r in rows
            ]
