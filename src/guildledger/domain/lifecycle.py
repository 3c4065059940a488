"""Task status derivation.

Automatic transitions only move forward::

    pending -> in_progress -> completed

``cancelled`` is reached only through an explicit coordinator action and is
sticky: the deriver is a no-op for cancelled tasks. Both ``completed`` and
``cancelled`` are terminal; reopening is a separate coordinator action that
this module does not provide.

Over-delivery is allowed: ``quantity_completed`` may exceed
``quantity_requested``. Any report at or above the requested amount derives
``completed`` and the progress percentage stays clamped at 100.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from guildledger.domain.errors import TaskClosed
from guildledger.domain.ledger import coerce_quantity, progress_percentage
from guildledger.domain.model import TaskStatus

if TYPE_CHECKING:
    from collections.abc import Iterable

    from guildledger.domain.model import Task


def derive_status(task: Task, quantity_completed: int) -> TaskStatus:
    """Return the status ``task`` takes once ``quantity_completed`` is reported.

    Completion is checked before the in-progress rule, so a first report that
    already reaches the target goes straight to ``completed``.
    """

    if task.status is TaskStatus.CANCELLED:
        return task.status
    if quantity_completed >= task.quantity_requested:
        return TaskStatus.COMPLETED
    if quantity_completed > 0 and task.status is TaskStatus.PENDING:
        return TaskStatus.IN_PROGRESS
    return task.status


def apply_report(task: Task, quantity_completed: object) -> Task:
    """Return ``task`` as it should look after a contributor progress report."""

    if task.is_terminal:
        raise TaskClosed(f"Task {task.id} is {task.status} and no longer accepts reports")
    quantity = coerce_quantity(quantity_completed)
    return replace(task, quantity_completed=quantity, status=derive_status(task, quantity))


def cancel(task: Task) -> Task:
    if task.is_terminal:
        raise TaskClosed(f"Task {task.id} is already {task.status}")
    return replace(task, status=TaskStatus.CANCELLED)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def is_overdue(task: Task, now: datetime | None = None) -> bool:
    if task.deadline is None or task.is_terminal:
        return False
    current = now or _utcnow()
    deadline = task.deadline
    if deadline.tzinfo is None:
        deadline = deadline.replace(tzinfo=UTC)
    if current.tzinfo is None:
        current = current.replace(tzinfo=UTC)
    return deadline < current


def task_progress(task: Task) -> float:
    return progress_percentage(task.quantity_completed, task.quantity_requested)


@dataclass(frozen=True, slots=True)
class TaskSummary:
    """Counts shown on a contributor's assignment overview."""

    pending: int = 0
    in_progress: int = 0
    completed: int = 0
    cancelled: int = 0
    overdue: int = 0
    completion_rate: int = 0

    @property
    def total(self) -> int:
        return self.pending + self.in_progress + self.completed + self.cancelled


def summarize(tasks: Iterable[Task], *, now: datetime | None = None) -> TaskSummary:
    counts = dict.fromkeys(TaskStatus, 0)
    overdue = 0
    requested = 0
    completed = 0
    current = now or _utcnow()
    for task in tasks:
        counts[task.status] += 1
        if is_overdue(task, current):
            overdue += 1
        requested += task.quantity_requested
        completed += task.quantity_completed
    # Half-up rounding, as displayed on the dashboard.
    rate = math.floor(completed / requested * 100 + 0.5) if requested > 0 else 0
    return TaskSummary(
        pending=counts[TaskStatus.PENDING],
        in_progress=counts[TaskStatus.IN_PROGRESS],
        completed=counts[TaskStatus.COMPLETED],
        cancelled=counts[TaskStatus.CANCELLED],
        overdue=overdue,
        completion_rate=rate,
    )


__all__ = [
    "TaskSummary",
    "apply_report",
    "cancel",
    "derive_status",
    "is_overdue",
    "summarize",
    "task_progress",
]
