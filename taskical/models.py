"""Data models for task lists stored in iCalendar files."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum


class TaskStatus(str, Enum):
    """Task status. Values are the iCalendar STATUS tokens.

    Declaration order is the sort order used by ``TaskSort.STATUS``.
    """

    NEEDS_ACTION = "NEEDS-ACTION"
    IN_PROGRESS = "IN-PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    @property
    def rank(self) -> int:
        return _STATUS_ORDER.index(self)


_STATUS_ORDER = list(TaskStatus)


class TaskSort(Enum):
    """Fields a task list can be sorted by."""

    NONE = "none"
    SUMMARY = "summary"
    COMPLETED = "completed"
    DESCRIPTION = "description"
    PROGRESS = "progress"
    PRIORITY = "priority"
    STATUS = "status"
    DUE = "due"


def _now() -> datetime:
    return datetime.now().replace(microsecond=0)


def _new_id() -> uuid.UUID:
    return uuid.uuid4()


@dataclass
class Task:
    """A single to-do item (one VTODO component)."""

    summary: str = "New task"
    completed: bool = False
    description: str = ""
    progress: int = 0  # percent, 0-100
    priority: int = 0  # 0 = unset, otherwise 1-10
    status: TaskStatus = TaskStatus.IN_PROGRESS
    due: date | None = None
    id: uuid.UUID = field(default_factory=_new_id)
    created: datetime = field(default_factory=_now)

    def __post_init__(self) -> None:
        if self.status is TaskStatus.COMPLETED:
            self.completed = True

    def set_status(self, status: TaskStatus) -> None:
        """Set the status; COMPLETED also marks the task completed."""
        self.status = status
        if status is TaskStatus.COMPLETED:
            self.completed = True


_SORT_KEYS = {
    TaskSort.SUMMARY: lambda t: t.summary.lower(),
    TaskSort.COMPLETED: lambda t: t.completed,
    TaskSort.DESCRIPTION: lambda t: t.description.lower(),
    TaskSort.PROGRESS: lambda t: t.progress,
    TaskSort.PRIORITY: lambda t: t.priority,
    TaskSort.STATUS: lambda t: t.status.rank,
    # Dated tasks first, earliest first; undated tasks last.
    TaskSort.DUE: lambda t: (t.due is None, t.due or date.min),
}


@dataclass
class TaskList:
    """A calendar of tasks. Task order is display order."""

    name: str = "New list"
    tasks: list[Task] = field(default_factory=list)
    color: tuple[int, int, int] = (0, 0, 0)

    @property
    def by_status(self) -> dict[TaskStatus, list[Task]]:
        groups: dict[TaskStatus, list[Task]] = {}
        for task in self.tasks:
            groups.setdefault(task.status, []).append(task)
        return groups

    @property
    def by_id(self) -> dict[uuid.UUID, Task]:
        return {t.id: t for t in self.tasks}

    @property
    def pending_tasks(self) -> list[Task]:
        return [t for t in self.tasks if not t.completed]

    def add(self, task: Task) -> None:
        self.tasks.append(task)

    def remove(self, task_id: uuid.UUID) -> Task:
        """Remove and return the task with ``task_id``.

        Raises:
            KeyError: no task has that id.
        """
        for i, task in enumerate(self.tasks):
            if task.id == task_id:
                return self.tasks.pop(i)
        raise KeyError(task_id)

    def sort(self, key: TaskSort) -> None:
        """Stable in-place sort. ``TaskSort.NONE`` keeps the current order."""
        if key is TaskSort.NONE:
            return
        self.tasks.sort(key=_SORT_KEYS[key])


def sort(task_list: TaskList, key: TaskSort) -> None:
    task_list.sort(key)


def add(task_list: TaskList, task: Task) -> None:
    task_list.add(task)
