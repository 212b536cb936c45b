from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timedelta

import pytest
from sqlalchemy.exc import OperationalError

from taskflow.domain.entities import TaskEntity
from taskflow.domain.enums import CompletionStatus, TaskFrequency
from taskflow.domain.errors import StoreError, TaskNotFoundError, ValidationError
from taskflow.services.task_service import TaskService

TODAY = date(2026, 3, 15)


class FakeSubscription:
    def __init__(self, store: FakeStore) -> None:
        self._store = store

    def cancel(self) -> None:
        self._store.listeners = [
            entry for entry in self._store.listeners if entry[0] is not self
        ]


class FakeStore:
    def __init__(self) -> None:
        self.tasks: list[TaskEntity] = []
        self.listeners: list = []
        self.calls: list[str] = []
        self.fail_with: Exception | None = None
        self._id = 1

    def subscribe(self, user_id, on_snapshot, on_error=None):
        subscription = FakeSubscription(self)
        self.listeners.append((subscription, on_snapshot, on_error))
        on_snapshot(list(self.tasks))
        return subscription

    def list_tasks(self, user_id: str) -> list[TaskEntity]:
        return list(self.tasks)

    def create_task(self, user_id: str, data: dict) -> int:
        self._check("create")
        task = TaskEntity(
            id=self._id,
            title=data["title"],
            description=data.get("description", ""),
            frequency=TaskFrequency(data.get("frequency", "daily")),
            created_at=datetime.combine(TODAY - timedelta(days=1), datetime.min.time()),
        )
        self.tasks.append(task)
        self._id += 1
        self._emit()
        return task.id

    def update_task(self, user_id: str, task_id: int, data: dict) -> None:
        self._check("update")
        task = self._get(task_id)
        self._replace(replace(task, **data))

    def delete_task(self, user_id: str, task_id: int) -> None:
        self._check("delete")
        self._get(task_id)
        self.tasks = [t for t in self.tasks if t.id != task_id]
        self._emit()

    def set_completion(self, user_id, task_id, day, status) -> None:
        self._check("set_completion")
        task = self._get(task_id)
        completions = dict(task.completions)
        if status is None:
            completions.pop(day, None)
        else:
            completions[day] = status
        self._replace(replace(task, completions=completions))

    def emit_error(self, message: str) -> None:
        for _, _, on_error in self.listeners:
            if on_error:
                on_error(message)

    def _check(self, name: str) -> None:
        self.calls.append(name)
        if self.fail_with is not None:
            raise self.fail_with

    def _get(self, task_id: int) -> TaskEntity:
        task = next((t for t in self.tasks if t.id == task_id), None)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    def _replace(self, updated: TaskEntity) -> None:
        self.tasks = [updated if t.id == updated.id else t for t in self.tasks]
        self._emit()

    def _emit(self) -> None:
        for _, on_snapshot, _ in list(self.listeners):
            on_snapshot(list(self.tasks))


def make_service() -> tuple[FakeStore, TaskService]:
    store = FakeStore()
    service = TaskService(store, "user-1", today=lambda: TODAY)
    service.start()
    return store, service


def test_snapshot_replaces_tasks_and_stats() -> None:
    store, service = make_service()

    task_id = service.add_task("  Meditate  ", "ten minutes", "weekly")

    assert service.get_task(task_id).title == "Meditate"
    assert service.get_task(task_id).frequency == TaskFrequency.WEEKLY
    assert service.stats.weekly_stats.total == 1
    assert service.stats.weekly_stats.missed == 1
    assert service.stats.streak == 0


def test_empty_title_is_rejected_without_store_call() -> None:
    store, service = make_service()

    with pytest.raises(ValidationError):
        service.add_task("   ")

    assert store.calls == []


def test_unknown_frequency_is_rejected() -> None:
    store, service = make_service()

    with pytest.raises(ValidationError):
        service.add_task("Run", frequency="yearly")

    assert store.calls == []


def test_update_rejects_blank_title() -> None:
    store, service = make_service()
    task_id = service.add_task("Run")

    with pytest.raises(ValidationError):
        service.update_task(task_id, title="")

    service.update_task(task_id, title=" Jog ", description=" easy ")
    assert service.get_task(task_id).title == "Jog"
    assert service.get_task(task_id).description == "easy"


def test_cycle_today_status_goes_completed_missed_cleared() -> None:
    store, service = make_service()
    task_id = service.add_task("Run")

    seen = []
    for _ in range(4):
        seen.append(service.cycle_today_status(service.get_task(task_id)))

    assert seen == [
        CompletionStatus.COMPLETED,
        CompletionStatus.MISSED,
        None,
        CompletionStatus.COMPLETED,
    ]
    assert service.get_task(task_id).status_on(TODAY) == CompletionStatus.COMPLETED
    assert service.stats.weekly_chart_data[-1].completed == 1


def test_paused_task_drops_out_of_stats() -> None:
    store, service = make_service()
    task_id = service.add_task("Run")

    service.set_active(task_id, False)

    assert service.stats.monthly_stats.total == 0


def test_declined_delete_makes_no_store_call() -> None:
    store, service = make_service()
    task_id = service.add_task("Run")

    assert service.delete_task(task_id, confirm=lambda: False) is False
    assert "delete" not in store.calls
    assert service.delete_task(task_id, confirm=lambda: True) is True
    assert service.tasks == []


def test_store_failure_sets_error_and_reraises() -> None:
    store, service = make_service()
    store.fail_with = OperationalError("INSERT", {}, Exception("disk full"))

    with pytest.raises(StoreError):
        service.add_task("Run")

    assert service.error == "Failed to add task."


def test_missing_task_error_is_surfaced() -> None:
    store, service = make_service()

    with pytest.raises(TaskNotFoundError):
        service.delete_task(42)

    assert service.error == "Task 42 not found."
    service.clear_error()
    assert service.error is None


def test_subscription_error_is_recorded_and_next_snapshot_clears_it() -> None:
    store, service = make_service()

    store.emit_error("permission denied")
    assert service.error == "permission denied"

    service.add_task("Run")
    assert service.error is None


def test_stop_cancels_subscription() -> None:
    store, service = make_service()
    service.stop()

    store.create_task("user-1", {"title": "Elsewhere"})

    assert service.tasks == []
    assert store.listeners == []


def test_export_requires_tasks() -> None:
    store, service = make_service()

    with pytest.raises(ValidationError):
        service.export_usage()


def test_export_uses_current_streak(tmp_path) -> None:
    store, service = make_service()
    task_id = service.add_task("Run")
    service.cycle_today_status(service.get_task(task_id))
    target = tmp_path / "usage.csv"

    text = service.export_usage(target)

    assert text.startswith("streak_days,1\r\n")
    assert target.read_bytes().decode("utf-8") == text
