# src/taskdesk/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

View-models depend on these Protocols instead of the HTTP client,
which keeps them testable with in-memory fakes.
"""

from typing import Any, Protocol, TypeVar

from .models import Task, TaskStatus

T = TypeVar("T")


class ResourceRepo(Protocol[T]):
    """One remote collection (users or tasks)."""

    async def list(self) -> list[T]: ...
    async def get(self, item_id: str) -> T: ...
    async def create(self, body: Any) -> T: ...
    async def update(self, item_id: str, body: Any) -> T: ...
    async def delete(self, item_id: str) -> None: ...


class TaskRepo(ResourceRepo[Task], Protocol):
    async def update_status(self, task_id: str, status: TaskStatus | str) -> Task: ...
    async def move(self, task_id: str, user_id: str) -> Task: ...