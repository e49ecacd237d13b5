from __future__ import annotations

from typing import Protocol, Sequence

from .model import Assignment


class AssignmentDirectory(Protocol):
    """Assignments are created by the assignment workflow; this core only reads them."""

    def list_assignments(self, worker_id: int) -> Sequence[Assignment]:
        raise NotImplementedError
