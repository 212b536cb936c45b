from __future__ import annotations

from datetime import date
from typing import Iterable

from .entities import TaskEntity
from .enums import CompletionStatus, Resolution

_EXPLICIT = {
    CompletionStatus.COMPLETED: Resolution.COMPLETED,
    CompletionStatus.MISSED: Resolution.MISSED,
}


def resolve(task: TaskEntity, day: date, today: date) -> Resolution:
    """Effective status of ``task`` on ``day``.

    Days before the task existed are excluded. An explicit record wins,
    otherwise today is still pending and any earlier day counts as missed.
    """
    if day < task.created_date:
        return Resolution.EXCLUDED
    recorded = task.status_on(day)
    if recorded is not None:
        return _EXPLICIT[CompletionStatus(recorded)]
    if day == today:
        return Resolution.PENDING
    return Resolution.MISSED


def eligible_tasks(tasks: Iterable[TaskEntity]) -> list[TaskEntity]:
    return [task for task in tasks if task.active]
