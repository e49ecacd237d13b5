from __future__ import annotations

from dataclasses import dataclass

from .assignments.mysql_assignment_repository import MySQLAssignmentDirectory
from .assignments.repository import AssignmentDirectory
from .attendance.mysql_attendance_repository import MySQLAttendanceStore
from .attendance.repository import RemoteAttendanceStore
from .attendance.service import AttendanceBoardRegistry
from .common.work_calendar import WorkCalendar
from .database.connection import DatabaseConnection, DBConfig
from .directory.mysql_directory import MySQLProjectDirectory, MySQLWorkerDirectory
from .directory.repository import ProjectDirectory, WorkerDirectory


@dataclass(frozen=True)
class Container:
    workers_repo: WorkerDirectory
    projects_repo: ProjectDirectory
    assignments_repo: AssignmentDirectory
    attendance_store: RemoteAttendanceStore
    calendar: WorkCalendar

    boards: AttendanceBoardRegistry


def build_container(
    *,
    workers: WorkerDirectory,
    projects: ProjectDirectory,
    assignments: AssignmentDirectory,
    store: RemoteAttendanceStore,
    calendar: WorkCalendar | None = None,
) -> Container:
    calendar = calendar or WorkCalendar()
    boards = AttendanceBoardRegistry(workers, projects, assignments, store, calendar=calendar)
    return Container(
        workers_repo=workers,
        projects_repo=projects,
        assignments_repo=assignments,
        attendance_store=store,
        calendar=calendar,
        boards=boards,
    )


def build_mysql_container(*, db_config: dict, calendar: WorkCalendar | None = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return build_container(
        workers=MySQLWorkerDirectory(conn),
        projects=MySQLProjectDirectory(conn),
        assignments=MySQLAssignmentDirectory(conn),
        store=MySQLAttendanceStore(conn),
        calendar=calendar,
    )
