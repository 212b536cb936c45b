from __future__ import annotations

from datetime import date
from typing import Callable, Protocol

from .entities import TaskEntity
from .enums import CompletionStatus

SnapshotCallback = Callable[[list[TaskEntity]], None]
ErrorCallback = Callable[[str], None]


class Subscription(Protocol):
    def cancel(self) -> None: ...


class TaskStore(Protocol):
    def subscribe(
        self,
        user_id: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback | None = None,
    ) -> Subscription: ...

    def list_tasks(self, user_id: str) -> list[TaskEntity]: ...

    def create_task(self, user_id: str, data: dict) -> int: ...

    def update_task(self, user_id: str, task_id: int, data: dict) -> None: ...

    def delete_task(self, user_id: str, task_id: int) -> None: ...

    def set_completion(
        self,
        user_id: str,
        task_id: int,
        day: date,
        status: CompletionStatus | None,
    ) -> None: ...
