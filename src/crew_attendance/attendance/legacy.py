"""Read-time migration of stored attendance rows.

Rows come from the MySQL table (snake_case columns) or from older remote
payloads (camelCase, a free-text ``status`` and a ``hours`` column that
predates ``hoursWorked``). Everything is normalized into the canonical
:class:`AttendanceRecord` before any other code looks at it.
"""

from __future__ import annotations

import logging
import re
from decimal import Decimal
from typing import Any, Mapping, Optional

from ..common.datetime_utils import as_day
from ..core.constants import FULL_DAY_HOURS, HALF_DAY_HOURS
from .model import AttendanceRecord, status_label

logger = logging.getLogger(__name__)

_HOURS_LABEL = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*h\s*$", re.IGNORECASE)

_ALIASES = {
    "record_id": ("attendance_id", "id"),
    "worker_id": ("worker_id", "workerId"),
    "project_id": ("project_id", "projectId"),
    "work_date": ("work_date", "date"),
    "is_present": ("is_present", "isPresent", "present"),
    "is_half_day": ("is_half_day", "isHalfDay"),
    "hours_worked": ("hours_worked", "hoursWorked"),
    "hours": ("hours",),
    "status": ("status",),
}


def _pick(row: Mapping[str, Any], field: str) -> Any:
    for name in _ALIASES[field]:
        if name in row and row[name] is not None:
            return row[name]
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if value is None:
        return None
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y"}
    return bool(value)


def _as_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    if isinstance(value, Decimal):
        return float(value)
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _hours_from_label(label: Optional[str]) -> Optional[float]:
    if not label:
        return None
    m = _HOURS_LABEL.match(label)
    return float(m.group(1)) if m else None


def _record_id(value: Any) -> Optional[int]:
    # Temporary client-side ids ("temp-...") never reached the store.
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def normalize_record(row: Mapping[str, Any]) -> AttendanceRecord:
    label = _pick(row, "status")
    label = str(label).strip() if label is not None else None
    label_key = (label or "").lower()

    is_half_day = _as_bool(_pick(row, "is_half_day"))
    if is_half_day is None:
        is_half_day = label_key == "half day"

    hours = _as_float(_pick(row, "hours_worked"))
    if hours is None:
        hours = _as_float(_pick(row, "hours"))
    if hours is None:
        hours = _hours_from_label(label)

    is_present = _as_bool(_pick(row, "is_present"))
    if is_present is None:
        if label_key in {"present", "half day"} or is_half_day:
            is_present = True
        elif label_key == "absent":
            is_present = False
        else:
            is_present = bool(hours)

    # An absent day carries no hours, whatever the stored row says.
    if not is_present:
        hours = 0.0
    elif hours is None:
        if is_half_day:
            hours = HALF_DAY_HOURS
        else:
            hours = FULL_DAY_HOURS

    # Half-day flag only holds for exactly the half-day hour count.
    is_half_day = bool(is_present and is_half_day and hours == HALF_DAY_HOURS)

    canonical = status_label(is_present=is_present, is_half_day=is_half_day, hours_worked=hours)
    if label is not None and label != canonical:
        logger.debug("Attendance label %r replaced by %r", label, canonical)

    return AttendanceRecord(
        record_id=_record_id(_pick(row, "record_id")),
        worker_id=int(_pick(row, "worker_id")),
        project_id=int(_pick(row, "project_id")),
        work_date=as_day(_pick(row, "work_date")),
        is_present=is_present,
        is_half_day=is_half_day,
        hours_worked=float(hours),
        status=canonical,
    )
