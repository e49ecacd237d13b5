from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Project, Worker
from .repository import ProjectDirectory, WorkerDirectory


class MySQLWorkerDirectory(WorkerDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_worker(self, worker_id: int) -> Optional[Worker]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT worker_id, full_name, role FROM workers WHERE worker_id=%s",
                (int(worker_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Worker(worker_id=int(r["worker_id"]), full_name=r["full_name"], role=r.get("role") or "")


class MySQLProjectDirectory(ProjectDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_project(self, project_id: int) -> Optional[Project]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT project_id, name, status, client FROM projects WHERE project_id=%s",
                (int(project_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Project(
                project_id=int(r["project_id"]),
                name=r["name"],
                status=r.get("status") or "",
                client=r.get("client") or "",
            )
