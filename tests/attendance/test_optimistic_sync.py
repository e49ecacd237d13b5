import threading
import time
from datetime import date

import pytest

from crew_attendance.attendance import status_cycle
from crew_attendance.attendance.guard import ConflictGuard
from crew_attendance.core.exceptions import DoubleBookedError, NotAssignedError, RemoteSyncError
from tests.fakes import P, Q, R, W, BlockingStore, InMemoryAttendanceStore, make_board, stored_row

DAY = date(2025, 1, 15)


def test_first_mark_inserts_and_adopts_id():
    board, store = make_board()

    rec = board.mark(DAY, status_cycle.FULL, project_id=P)

    assert store.ops()[-1] == "insert"
    assert rec.record_id is not None
    assert board.ledger.get(W, DAY, P).record_id == rec.record_id
    assert store.rows[rec.record_id]["status"] == "Present"


def test_known_id_is_updated_in_place():
    board, store = make_board()
    first = board.mark(DAY, status_cycle.FULL, project_id=P)
    store.calls.clear()

    second = board.mark(DAY, status_cycle.HALF, project_id=P)

    assert store.ops() == ["update_by_id"]
    assert second.record_id == first.record_id
    assert len(store.rows) == 1
    assert store.rows[first.record_id]["is_half_day"] is True


def test_row_created_elsewhere_is_updated_not_duplicated():
    board, store = make_board()
    # Another client inserted the row after this board loaded.
    store.seed(stored_row(50, P, DAY, hours=8))

    rec = board.mark(DAY, status_cycle.ABSENT, project_id=P)

    assert rec.record_id == 50
    assert "insert" not in store.ops()
    assert len(store.rows) == 1
    assert store.rows[50]["status"] == "Absent"


def test_insert_failure_restores_empty_cell():
    board, store = make_board()
    store.fail_on.add("insert")

    with pytest.raises(RemoteSyncError) as exc:
        board.mark(DAY, status_cycle.FULL, project_id=P)

    assert isinstance(exc.value.__cause__, ConnectionError)
    assert board.ledger.get(W, DAY, P) is None
    assert store.rows == {}


def test_update_failure_restores_previous_record():
    board, store = make_board(store=InMemoryAttendanceStore([stored_row(5, P, DAY, hours=8)]))
    before = board.ledger.get(W, DAY, P)
    store.fail_on.add("update_by_id")

    with pytest.raises(RemoteSyncError):
        board.toggle(DAY, project_id=P)

    assert board.ledger.get(W, DAY, P) == before
    assert store.rows[5]["hours_worked"] == 8


def test_rejected_mark_touches_nothing():
    board, store = make_board(store=InMemoryAttendanceStore([stored_row(5, R, DAY, hours=8)]))
    store.calls.clear()

    with pytest.raises(NotAssignedError):
        board.mark(DAY, status_cycle.FULL, project_id=Q)
    with pytest.raises(DoubleBookedError):
        board.mark(DAY, status_cycle.FULL, project_id=P)

    assert store.calls == []
    assert board.ledger.get(W, DAY, P) is None
    assert board.ledger.get(W, DAY, Q) is None


def test_clear_removes_and_is_idempotent():
    board, store = make_board(store=InMemoryAttendanceStore([stored_row(5, P, DAY, hours=8)]))

    removed = board.clear_mark(DAY, project_id=P)
    again = board.clear_mark(DAY, project_id=P)

    assert removed.record_id == 5
    assert again is None
    assert store.ops().count("delete_by_id") == 1
    assert board.ledger.get(W, DAY, P) is None


def test_clear_failure_restores_record():
    board, store = make_board(store=InMemoryAttendanceStore([stored_row(5, P, DAY, hours=8)]))
    store.fail_on.add("delete_by_id")

    with pytest.raises(RemoteSyncError) as exc:
        board.clear_mark(DAY, project_id=P)

    assert exc.value.record_id == 5
    assert board.ledger.get(W, DAY, P).record_id == 5


def test_optimistic_state_visible_while_write_in_flight():
    store = BlockingStore()
    board, _ = make_board(store=store)
    errors = []

    def run():
        try:
            board.mark(DAY, status_cycle.FULL, project_id=P)
        except Exception as exc:  # pragma: no cover - surfaced by the assertion below
            errors.append(exc)

    t = threading.Thread(target=run)
    t.start()
    assert store.entered.wait(timeout=5)

    cell = board.get_cell_state(DAY, project_id=P)
    assert cell.label == "Present"
    assert cell.record_id is None
    assert cell.pending is True

    store.release.set()
    t.join(timeout=5)
    assert not t.is_alive()
    assert errors == []
    assert board.get_cell_state(DAY, project_id=P).pending is False


def test_writes_to_same_triple_are_serialized():
    store = BlockingStore()
    board, _ = make_board(store=store)
    results = []

    def toggle():
        results.append(board.toggle(DAY, project_id=P))

    first = threading.Thread(target=toggle)
    first.start()
    assert store.entered.wait(timeout=5)

    second = threading.Thread(target=toggle)
    second.start()
    second.join(timeout=0.2)
    # The second toggle waits for the first write to settle.
    assert second.is_alive()
    assert store.ops() == ["query_by_worker", "query_by_worker", "insert"]

    store.release.set()
    first.join(timeout=5)
    second.join(timeout=5)

    assert sorted(r.status for r in results) == ["Half Day", "Present"]
    assert len(store.rows) == 1
    assert next(iter(store.rows.values()))["status"] == "Half Day"
    assert store.ops().count("insert") == 1


def test_different_triple_is_not_blocked():
    store = BlockingStore()
    board, _ = make_board(store=store)
    other_day = date(2025, 1, 16)

    t = threading.Thread(target=lambda: board.mark(DAY, status_cycle.FULL, project_id=P))
    t.start()
    assert store.entered.wait(timeout=5)

    other = threading.Thread(target=lambda: board.mark(other_day, status_cycle.HALF, project_id=P))
    other.start()
    deadline = time.monotonic() + 5
    while store.ops().count("insert") < 2 and time.monotonic() < deadline:
        time.sleep(0.01)

    # Both writes reached the store while the first is still in flight.
    assert store.ops().count("insert") == 2
    assert board.get_cell_state(DAY, project_id=P).pending is True
    assert board.get_cell_state(other_day, project_id=P).label == "Half Day"

    store.release.set()
    t.join(timeout=5)
    other.join(timeout=5)
    assert not t.is_alive() and not other.is_alive()
    assert len(store.rows) == 2


def test_row_deleted_elsewhere_is_saved_again():
    board, store = make_board(store=InMemoryAttendanceStore([stored_row(5, P, DAY, hours=8)]))
    # Another client removed the row after this board loaded.
    del store.rows[5]

    rec = board.mark(DAY, status_cycle.HALF, project_id=P)
    again = board.toggle(DAY, project_id=P)

    assert rec.record_id not in (None, 5)
    assert board.ledger.get(W, DAY, P).record_id == rec.record_id
    assert again.record_id == rec.record_id
    assert list(store.rows) == [rec.record_id]
    assert store.rows[rec.record_id]["status"] == "Absent"


def test_concurrent_marks_on_two_projects_same_day(monkeypatch):
    board, store = make_board()
    check = ConflictGuard.validate_mark
    both_checked = threading.Barrier(2, timeout=0.5)

    def check_then_wait(self, *args):
        check(self, *args)
        # Give the other mark a chance to pass its own check before either writes.
        try:
            both_checked.wait()
        except threading.BrokenBarrierError:
            pass

    monkeypatch.setattr(ConflictGuard, "validate_mark", check_then_wait)
    outcomes = {}

    def mark(project_id):
        try:
            outcomes[project_id] = board.mark(DAY, status_cycle.FULL, project_id=project_id)
        except DoubleBookedError as exc:
            outcomes[project_id] = exc

    threads = [threading.Thread(target=mark, args=(pid,)) for pid in (P, R)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)

    assert not any(t.is_alive() for t in threads)
    rejected = [pid for pid, out in outcomes.items() if isinstance(out, DoubleBookedError)]
    assert len(rejected) == 1
    present = [r.project_id for r in board.ledger.records_on(W, DAY) if r.is_present]
    assert len(present) == 1
    assert [row["project_id"] for row in store.rows.values()] == present


def test_mark_on_other_project_sees_write_in_flight():
    store = BlockingStore()
    board, _ = make_board(store=store)

    t = threading.Thread(target=lambda: board.mark(DAY, status_cycle.FULL, project_id=P))
    t.start()
    assert store.entered.wait(timeout=5)

    try:
        with pytest.raises(DoubleBookedError) as exc:
            board.mark(DAY, status_cycle.FULL, project_id=R)
    finally:
        store.release.set()
        t.join(timeout=5)

    assert exc.value.other_project_id == P
    assert not t.is_alive()
    assert [row["project_id"] for row in store.rows.values()] == [P]
