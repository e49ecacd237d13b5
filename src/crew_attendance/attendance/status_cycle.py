"""Attendance status cycle.

Quick toggle: Empty -> Full (8h) -> Half (4h) -> Absent (0h) -> Full.
There is no terminal state. Custom hours and Clear are explicit actions only.
"""

from __future__ import annotations

from typing import Optional

from ..common.validators import require_custom_hours
from ..core.constants import FULL_DAY_HOURS, HALF_DAY_HOURS
from ..core.enums import MarkAction
from ..core.exceptions import ValidationError
from .model import AttendanceRecord, MarkState

FULL = MarkState(is_present=True, is_half_day=False, hours_worked=FULL_DAY_HOURS)
HALF = MarkState(is_present=True, is_half_day=True, hours_worked=HALF_DAY_HOURS)
ABSENT = MarkState(is_present=False, is_half_day=False, hours_worked=0.0)


def custom(hours) -> MarkState:
    return MarkState(is_present=True, is_half_day=False, hours_worked=require_custom_hours(hours))


def next_state(current: Optional[AttendanceRecord]) -> MarkState:
    """Total transition function over every record shape.

    Records are normalized before they reach here, so a legacy row that was
    only flagged present arrives as a full day.
    """

    if current is None:
        return FULL
    if current.is_present and not current.is_half_day:
        return HALF
    if current.is_half_day:
        return ABSENT
    # Absent returns to Full rather than clearing the record.
    return FULL


def state_for_action(action: MarkAction, *, hours=None) -> MarkState:
    if action == MarkAction.FULL:
        return FULL
    if action == MarkAction.HALF:
        return HALF
    if action == MarkAction.ABSENT:
        return ABSENT
    if action == MarkAction.CUSTOM:
        return custom(hours)
    raise ValidationError(f"Action {action.value!r} does not describe a mark state")
