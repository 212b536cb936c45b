from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Callable, TypeVar

from sqlalchemy.exc import SQLAlchemyError

from taskflow.domain.dates import utc_today
from taskflow.domain.entities import DerivedStats, TaskEntity
from taskflow.domain.enums import CompletionStatus, TaskFrequency, next_today_status
from taskflow.domain.errors import StoreError, ValidationError
from taskflow.domain.ports import Subscription, TaskStore
from taskflow.services.analytics import recompute
from taskflow.services.export import format_usage_csv, write_usage_csv

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TaskService:
    """Per-user facade over a task store.

    Holds the latest task snapshot and the statistics derived from it, both
    replaced whole on every snapshot, plus the last error message.
    """

    def __init__(
        self,
        store: TaskStore,
        user_id: str,
        today: Callable[[], date] = utc_today,
    ) -> None:
        self._store = store
        self._user_id = user_id
        self._today = today
        self._subscription: Subscription | None = None
        self.tasks: list[TaskEntity] = []
        self.stats = DerivedStats()
        self.error: str | None = None

    @property
    def user_id(self) -> str:
        return self._user_id

    def today(self) -> date:
        return self._today()

    def start(self) -> None:
        if self._subscription is not None:
            return
        self._subscription = self._store.subscribe(
            self._user_id, self._on_snapshot, self._on_error
        )

    def stop(self) -> None:
        if self._subscription is None:
            return
        self._subscription.cancel()
        self._subscription = None

    def clear_error(self) -> None:
        self.error = None

    def get_task(self, task_id: int) -> TaskEntity | None:
        return next((task for task in self.tasks if task.id == task_id), None)

    def add_task(
        self,
        title: str,
        description: str = "",
        frequency: TaskFrequency | str = TaskFrequency.DAILY,
    ) -> int:
        title = _require_title(title)
        data = {
            "title": title,
            "description": (description or "").strip(),
            "frequency": _parse_frequency(frequency),
        }
        return self._call("add task", self._store.create_task, self._user_id, data)

    def update_task(self, task_id: int, **changes) -> None:
        data: dict = {}
        if "title" in changes:
            data["title"] = _require_title(changes.pop("title"))
        if "description" in changes:
            data["description"] = (changes.pop("description") or "").strip()
        if "frequency" in changes:
            data["frequency"] = _parse_frequency(changes.pop("frequency"))
        if "active" in changes:
            data["active"] = bool(changes.pop("active"))
        if changes:
            raise ValidationError(f"Unknown task fields: {', '.join(sorted(changes))}")
        if not data:
            return
        self._call("update task", self._store.update_task, self._user_id, task_id, data)

    def set_active(self, task_id: int, active: bool) -> None:
        self.update_task(task_id, active=active)

    def delete_task(self, task_id: int, confirm: Callable[[], bool] | None = None) -> bool:
        if confirm is not None and not confirm():
            return False
        self._call("delete task", self._store.delete_task, self._user_id, task_id)
        return True

    def cycle_today_status(self, task: TaskEntity) -> CompletionStatus | None:
        today = self._today()
        next_status = next_today_status(task.status_on(today))
        self._call(
            "update task status",
            self._store.set_completion,
            self._user_id,
            task.id,
            today,
            next_status,
        )
        return next_status

    def export_usage(self, path: Path | None = None) -> str:
        if not self.tasks:
            raise ValidationError("No tasks to export.")
        text = format_usage_csv(self.tasks, self.stats.streak, self._today())
        if path is not None:
            write_usage_csv(path, text)
            logger.info("Exported usage report to %s", path)
        return text

    def _on_snapshot(self, tasks: list[TaskEntity]) -> None:
        self.tasks = list(tasks)
        self.stats = recompute(self.tasks, self._today())
        self.error = None

    def _on_error(self, message: str) -> None:
        self.error = message or "Failed to load tasks."

    def _call(self, action: str, func: Callable[..., T], *args) -> T:
        self.error = None
        try:
            return func(*args)
        except StoreError as exc:
            logger.warning("Failed to %s: %s", action, exc)
            self.error = str(exc) or f"Failed to {action}."
            raise
        except SQLAlchemyError as exc:
            logger.exception("Failed to %s", action)
            self.error = f"Failed to {action}."
            raise StoreError(self.error) from exc


def _require_title(title: str | None) -> str:
    cleaned = (title or "").strip()
    if not cleaned:
        raise ValidationError("Title is required.")
    return cleaned


def _parse_frequency(value: TaskFrequency | str) -> TaskFrequency:
    try:
        return TaskFrequency(value)
    except ValueError as exc:
        raise ValidationError(f"Unknown frequency: {value}") from exc
