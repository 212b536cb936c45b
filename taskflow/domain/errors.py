from __future__ import annotations


class TaskFlowError(Exception):
    """Base class for errors surfaced to the caller."""


class ValidationError(TaskFlowError):
    """Input rejected before any store call was made."""


class StoreError(TaskFlowError):
    """A task store operation failed."""


class TaskNotFoundError(StoreError):
    def __init__(self, task_id: object) -> None:
        super().__init__(f"Task {task_id} not found.")
        self.task_id = task_id
