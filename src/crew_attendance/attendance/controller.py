from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import as_day, parse_month, today
from ..core.enums import MarkAction
from ..core.exceptions import (
    DomainError,
    DoubleBookedError,
    MarkRejected,
    NotAssignedError,
    NotFoundError,
    RemoteSyncError,
    ValidationError,
)
from ..container import Container
from .model import AttendanceRecord


def _record_json(record: AttendanceRecord | None):
    if record is None:
        return None
    return {
        "id": record.record_id,
        "worker_id": record.worker_id,
        "project_id": record.project_id,
        "date": record.work_date.isoformat(),
        "is_present": record.is_present,
        "is_half_day": record.is_half_day,
        "hours_worked": record.hours_worked,
        "status": record.status,
    }


def _status_code(exc: DomainError) -> int:
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, NotAssignedError):
        return 422
    if isinstance(exc, DoubleBookedError):
        return 409
    if isinstance(exc, RemoteSyncError):
        return 502
    return 400


def _month_arg() -> tuple[int, int]:
    value = request.args.get("month")
    if not value:
        d = today()
        return d.year, d.month
    return parse_month(value)


def register(app: Flask, container: Container) -> None:
    boards = container.boards

    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        body = {"success": False, "message": str(exc)}
        if isinstance(exc, MarkRejected):
            body["reason"] = exc.reason.value
        if isinstance(exc, DoubleBookedError):
            body["other_project_id"] = exc.other_project_id
        if isinstance(exc, RemoteSyncError):
            body["reverted"] = True
        return jsonify(body), _status_code(exc)

    @app.route("/api/workers/<int:worker_id>/select", methods=["POST"], endpoint="select_worker")
    def select_worker(worker_id: int):
        board = boards.board_for(worker_id, reload=True)
        worker = board.worker
        return jsonify(
            {
                "success": True,
                "worker": {"id": worker.worker_id, "full_name": worker.full_name, "role": worker.role},
                "default_project_id": board.default_project_id(),
                "assignments": [s.to_dict() for s in board.get_project_assignments()],
            }
        )

    @app.route("/api/workers/<int:worker_id>/assignments", methods=["GET"], endpoint="project_assignments")
    def project_assignments(worker_id: int):
        board = boards.board_for(worker_id)
        return jsonify({"success": True, "assignments": [s.to_dict() for s in board.get_project_assignments()]})

    @app.route("/api/workers/<int:worker_id>/cells/<day>", methods=["GET"], endpoint="cell_state")
    def cell_state(worker_id: int, day: str):
        board = boards.board_for(worker_id)
        cell = board.get_cell_state(as_day(day), project_id=request.args.get("project_id", type=int))
        return jsonify({"success": True, "cell": cell.to_dict()})

    @app.route("/api/workers/<int:worker_id>/calendar", methods=["GET"], endpoint="month_calendar")
    def month_calendar(worker_id: int):
        board = boards.board_for(worker_id)
        year, month = _month_arg()
        cells = board.get_month_cells(year, month, project_id=request.args.get("project_id", type=int))
        return jsonify({"success": True, "month": f"{year:04d}-{month:02d}", "cells": [c.to_dict() for c in cells]})

    @app.route("/api/workers/<int:worker_id>/summary", methods=["GET"], endpoint="monthly_summary")
    def monthly_summary(worker_id: int):
        board = boards.board_for(worker_id)
        year, month = _month_arg()
        summary = board.get_monthly_summary(year, month, project_id=request.args.get("project_id", type=int))
        return jsonify({"success": True, "summary": summary.to_dict()})

    @app.route("/api/workers/<int:worker_id>/marks", methods=["POST"], endpoint="mark_attendance")
    def mark_attendance(worker_id: int):
        data = request.get_json(silent=True) or {}
        try:
            action = MarkAction(str(data.get("action", MarkAction.TOGGLE.value)).lower())
        except ValueError as exc:
            raise ValidationError(f"Unknown action: {data.get('action')!r}") from exc
        if not data.get("date"):
            raise ValidationError("date is required")

        board = boards.board_for(worker_id)
        record = board.apply_action(
            as_day(data["date"]),
            action,
            project_id=data.get("project_id"),
            hours=data.get("hours"),
        )
        return jsonify({"success": True, "record": _record_json(record)})

    @app.route("/api/workers/<int:worker_id>/marks/<day>", methods=["DELETE"], endpoint="clear_attendance")
    def clear_attendance(worker_id: int, day: str):
        board = boards.board_for(worker_id)
        removed = board.clear_mark(as_day(day), project_id=request.args.get("project_id", type=int))
        return jsonify({"success": True, "removed": _record_json(removed)})
