from datetime import date

import pytest

from crew_attendance.assignments.index import AssignmentIndex
from crew_attendance.attendance.guard import ConflictGuard
from crew_attendance.attendance.ledger import AttendanceLedger
from crew_attendance.core.enums import RejectionReason
from crew_attendance.core.exceptions import DoubleBookedError, NotAssignedError
from tests.fakes import P, Q, R, W, InMemoryAttendanceStore, assignment, stored_row

DAY = date(2025, 1, 15)


def _guard(rows=()):
    store = InMemoryAttendanceStore(list(rows))
    ledger = AttendanceLedger(store)
    ledger.load(W)
    index = AssignmentIndex(
        [
            assignment(1, P, date(2025, 1, 1), date(2025, 1, 31)),
            assignment(2, R, date(2025, 1, 1), date(2025, 1, 31)),
        ]
    )
    return ConflictGuard(ledger, lambda: index)


def test_assigned_day_passes():
    _guard().validate_mark(W, DAY, P)


def test_unassigned_project_rejected():
    with pytest.raises(NotAssignedError) as exc:
        _guard().validate_mark(W, DAY, Q)

    assert exc.value.reason is RejectionReason.NOT_ASSIGNED
    assert exc.value.project_id == Q


def test_day_outside_window_rejected():
    with pytest.raises(NotAssignedError):
        _guard().validate_mark(W, date(2025, 2, 1), P)


def test_present_on_other_project_rejected():
    guard = _guard([stored_row(1, R, DAY, hours=8)])

    with pytest.raises(DoubleBookedError) as exc:
        guard.validate_mark(W, DAY, P)

    assert exc.value.reason is RejectionReason.DOUBLE_BOOKED
    assert exc.value.other_project_id == R


def test_absent_on_other_project_does_not_block():
    guard = _guard([stored_row(1, R, DAY, hours=0, present=False)])

    guard.validate_mark(W, DAY, P)


def test_same_project_record_does_not_block():
    guard = _guard([stored_row(1, P, DAY, hours=8)])

    guard.validate_mark(W, DAY, P)


def test_not_assigned_checked_before_double_booking():
    guard = _guard([stored_row(1, R, DAY, hours=8)])

    with pytest.raises(NotAssignedError):
        guard.validate_mark(W, DAY, Q)
