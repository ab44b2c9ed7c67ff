from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from queueaio._internal.common.types import Batch


@dataclass(slots=True, kw_only=True)
class Task:
    """A unit of work; the same object is redelivered on every retry."""

    id: int
    payload: Any
    attempts: int = 0


@dataclass(slots=True, kw_only=True, eq=False)
class Dispatch:
    unit_id: int
    tasks: tuple[Task, ...]
    grouped: bool = False
    completed: bool = field(default=False, init=False)

    @property
    def task_ids(self) -> tuple[int, ...]:
        return tuple(task.id for task in self.tasks)

    def batch(self) -> Batch:
        return {task.id: task.payload for task in self.tasks}
