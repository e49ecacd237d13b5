from datetime import date, datetime

from crew_attendance.assignments.index import AssignmentIndex
from crew_attendance.common.work_calendar import WorkCalendar
from tests.fakes import P, Q, W, assignment


def test_pair_without_interval_is_never_assigned():
    index = AssignmentIndex([assignment(1, P, date(2025, 1, 1), date(2025, 1, 31))])

    assert index.is_date_assigned(W, Q, date(2025, 1, 10)) is False
    assert index.is_date_assigned(2, P, date(2025, 1, 10)) is False


def test_bounds_are_inclusive():
    index = AssignmentIndex([assignment(1, P, date(2025, 1, 1), date(2025, 1, 31))])

    assert index.is_date_assigned(W, P, date(2025, 1, 1))
    assert index.is_date_assigned(W, P, date(2025, 1, 31))
    assert not index.is_date_assigned(W, P, date(2024, 12, 31))
    assert not index.is_date_assigned(W, P, date(2025, 2, 1))


def test_open_ended_intervals():
    index = AssignmentIndex(
        [
            assignment(1, P, None, date(2025, 1, 31)),
            assignment(2, Q, date(2025, 3, 1), None),
        ]
    )

    assert index.is_date_assigned(W, P, date(2000, 1, 1))
    assert not index.is_date_assigned(W, P, date(2025, 2, 1))
    assert index.is_date_assigned(W, Q, date(2030, 6, 1))
    assert not index.is_date_assigned(W, Q, date(2025, 2, 28))


def test_multiple_intervals_are_a_disjunction():
    index = AssignmentIndex(
        [
            assignment(1, P, date(2025, 1, 1), date(2025, 1, 10)),
            assignment(2, P, date(2025, 1, 20), date(2025, 1, 31)),
        ]
    )

    assert index.is_date_assigned(W, P, date(2025, 1, 5))
    assert not index.is_date_assigned(W, P, date(2025, 1, 15))
    assert index.is_date_assigned(W, P, date(2025, 1, 25))
    assert len(index) == 2


def test_time_of_day_is_ignored():
    index = AssignmentIndex([assignment(1, P, date(2025, 1, 1), date(2025, 1, 31))])

    assert index.is_date_assigned(W, P, datetime(2025, 1, 31, 23, 59))
    assert index.is_date_assigned(W, P, "2025-01-31T18:00:00")


def test_projects_on_day():
    index = AssignmentIndex(
        [
            assignment(1, P, date(2025, 1, 1), date(2025, 1, 31)),
            assignment(2, Q, date(2025, 1, 15), date(2025, 2, 15)),
        ]
    )

    assert index.projects_on(W, date(2025, 1, 10)) == [P]
    assert index.projects_on(W, date(2025, 1, 20)) == [P, Q]
    assert index.projects_on(W, date(2025, 3, 1)) == []


def test_assigned_days_respects_calendar():
    index = AssignmentIndex([assignment(1, P, date(2025, 1, 1), date(2025, 1, 12))])
    calendar = WorkCalendar(count_weekends=False, holidays=frozenset({date(2025, 1, 1)}))

    all_days = index.assigned_days(W, date(2025, 1, 1), date(2025, 1, 31))
    working = index.assigned_days(W, date(2025, 1, 1), date(2025, 1, 31), calendar=calendar)

    assert len(all_days) == 12
    # Jan 4/5 and 11/12 are weekends, Jan 1 is a holiday.
    assert len(working) == 7
    assert date(2025, 1, 1) not in working
