from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Shape of a calendar cell, derived from the structured record fields."""

    EMPTY = "Empty"
    PRESENT = "Present"
    HALF_DAY = "Half Day"
    ABSENT = "Absent"
    CUSTOM = "Custom"


class MarkAction(str, Enum):
    """Explicit per-status actions offered next to the quick toggle."""

    FULL = "full"
    HALF = "half"
    ABSENT = "absent"
    CUSTOM = "custom"
    CLEAR = "clear"
    TOGGLE = "toggle"


class RejectionReason(str, Enum):
    NOT_ASSIGNED = "NOT_ASSIGNED"
    DOUBLE_BOOKED = "DOUBLE_BOOKED"
