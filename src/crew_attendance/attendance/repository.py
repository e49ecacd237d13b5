from __future__ import annotations

from typing import Any, Mapping, Protocol, Sequence


class RemoteAttendanceStore(Protocol):
    """Remote persistence for attendance rows.

    Rows are returned raw; the ledger normalizes them (see ``legacy``)
    because older rows do not carry every structured field.
    """

    def query_by_worker(self, worker_id: int) -> Sequence[Mapping[str, Any]]:
        raise NotImplementedError

    def insert(self, payload: Mapping[str, Any]) -> Mapping[str, Any]:
        """Create a row and return it including its new id."""

        raise NotImplementedError

    def update_by_id(self, record_id: int, patch: Mapping[str, Any]) -> Mapping[str, Any]:
        raise NotImplementedError

    def delete_by_id(self, record_id: int) -> None:
        raise NotImplementedError
