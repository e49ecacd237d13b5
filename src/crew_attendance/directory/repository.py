from __future__ import annotations

from typing import Optional, Protocol

from .model import Project, Worker


class WorkerDirectory(Protocol):
    """Read-only worker lookup owned by the workforce module."""

    def get_worker(self, worker_id: int) -> Optional[Worker]:
        raise NotImplementedError


class ProjectDirectory(Protocol):
    def get_project(self, project_id: int) -> Optional[Project]:
        raise NotImplementedError
