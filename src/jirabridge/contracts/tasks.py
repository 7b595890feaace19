"""Local task store contract."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class TaskStore(ABC):
    """The host application's task board, consumed as a capability."""

    @abstractmethod
    async def create_task(self, title: str, status: str) -> str:
        """Create a task in column *status* and return its id."""

    @abstractmethod
    async def update_task(self, task_id: str, fields: dict[str, Any]) -> None:
        """Merge *fields* (description, priority, tags, ...) into the task."""

    @abstractmethod
    async def move_task(self, task_id: str, column: str) -> None:
        """Move the task to *column*."""
