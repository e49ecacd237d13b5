from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Worker:
    """Domain entity: a worker. Opaque here beyond id and display name."""

    worker_id: int
    full_name: str
    role: str = ""


@dataclass(frozen=True)
class Project:
    """Domain entity: a project site."""

    project_id: int
    name: str
    status: str = "Ongoing"
    client: str = ""
