# src/task_browser/core/ports.py

"""
Ports (interfaces) the browse engine talks to.

Callers depend on these Protocols rather than on TaskStore, so a fake store
or a frozen clock can be dropped in for tests.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from ..tasks.task_models import BrowseRequest, TaskRecord


class Clock(Protocol):
    """Returns the current instant as epoch seconds (UTC)."""
    def __call__(self) -> float: ...


class TaskBrowser(Protocol):
    """Anything that can answer a browse request from persistent storage."""
    async def browse(self, request: BrowseRequest, *, now: float | None = None) -> list[TaskRecord]: ...


class TaskRepo(TaskBrowser, Protocol):
    def add_task(
            self,
            *,
            content: str,
            tags: Sequence[str] | None = None,
            completed: bool = False,
            captured: float | None = None,
            start: float | None = None,
            due: float | None = None,
            schedule: float | None = None,
    ) -> int: ...

    def all_tasks(self) -> list[TaskRecord]: ...
    def count_tasks(self) -> int: ...
