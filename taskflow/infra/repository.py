from __future__ import annotations

import logging
from datetime import date
from typing import Callable

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from taskflow.domain.entities import TaskEntity
from taskflow.domain.enums import CompletionStatus, TaskFrequency
from taskflow.domain.errors import TaskNotFoundError, ValidationError
from taskflow.domain.ports import ErrorCallback, SnapshotCallback

from .db import SessionLocal
from .models import CompletionModel, TaskModel, utcnow

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset({"title", "description", "frequency", "active"})


def _to_entity(model: TaskModel) -> TaskEntity:
    return TaskEntity(
        id=model.id,
        title=model.title,
        description=model.description,
        frequency=TaskFrequency(model.frequency),
        created_at=model.created_at,
        active=model.active,
        completions={row.day: CompletionStatus(row.status) for row in model.completions},
    )


class _Listener:
    def __init__(
        self,
        repo: TaskRepository,
        user_id: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback | None,
    ) -> None:
        self._repo = repo
        self.user_id = user_id
        self.on_snapshot = on_snapshot
        self.on_error = on_error
        self.active = True

    def cancel(self) -> None:
        if not self.active:
            return
        self.active = False
        self._repo._detach(self)


class TaskRepository:
    """SQLAlchemy task store scoped by user id.

    Subscribers receive the user's full task list on subscribe and again after
    every committed mutation for that user.
    """

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal) -> None:
        self._session_factory = session_factory
        self._listeners: dict[str, list[_Listener]] = {}

    def subscribe(
        self,
        user_id: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback | None = None,
    ) -> _Listener:
        listener = _Listener(self, user_id, on_snapshot, on_error)
        self._listeners.setdefault(user_id, []).append(listener)
        self._notify([listener])
        return listener

    def list_tasks(self, user_id: str) -> list[TaskEntity]:
        with self._session_factory() as session:
            stmt = (
                select(TaskModel)
                .options(selectinload(TaskModel.completions))
                .where(TaskModel.user_id == user_id)
                .order_by(TaskModel.created_at.asc(), TaskModel.id.asc())
            )
            return [_to_entity(task) for task in session.scalars(stmt)]

    def create_task(self, user_id: str, data: dict) -> int:
        with self._session_factory() as session:
            task = TaskModel(
                user_id=user_id,
                title=data["title"],
                description=data.get("description") or "",
                frequency=TaskFrequency(data.get("frequency") or TaskFrequency.DAILY).value,
                created_at=utcnow(),
                active=True,
            )
            session.add(task)
            session.commit()
            task_id = task.id
        logger.info("Created task %s for user %s", task_id, user_id)
        self._publish(user_id)
        return task_id

    def update_task(self, user_id: str, task_id: int, data: dict) -> None:
        unknown = set(data) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")
        with self._session_factory() as session:
            task = self._get_owned(session, user_id, task_id)
            for key, value in data.items():
                if key == "frequency":
                    value = TaskFrequency(value).value
                setattr(task, key, value)
            session.commit()
        logger.info("Updated task %s fields %s", task_id, sorted(data))
        self._publish(user_id)

    def delete_task(self, user_id: str, task_id: int) -> None:
        with self._session_factory() as session:
            task = self._get_owned(session, user_id, task_id)
            session.delete(task)
            session.commit()
        logger.info("Deleted task %s", task_id)
        self._publish(user_id)

    def set_completion(
        self,
        user_id: str,
        task_id: int,
        day: date,
        status: CompletionStatus | None,
    ) -> None:
        with self._session_factory() as session:
            self._get_owned(session, user_id, task_id)
            record = session.scalar(
                select(CompletionModel).where(
                    CompletionModel.task_id == task_id,
                    CompletionModel.day == day,
                )
            )
            if status is None:
                if record is not None:
                    session.delete(record)
            elif record is None:
                session.add(CompletionModel(task_id=task_id, day=day, status=str(status)))
            else:
                record.status = str(status)
            session.commit()
        logger.info("Set task %s on %s to %s", task_id, day.isoformat(), status or "unmarked")
        self._publish(user_id)

    @staticmethod
    def _get_owned(session: Session, user_id: str, task_id: int) -> TaskModel:
        task = session.get(TaskModel, task_id)
        if task is None or task.user_id != user_id:
            raise TaskNotFoundError(task_id)
        return task

    def _detach(self, listener: _Listener) -> None:
        listeners = self._listeners.get(listener.user_id, [])
        if listener in listeners:
            listeners.remove(listener)
        if not listeners:
            self._listeners.pop(listener.user_id, None)

    def _publish(self, user_id: str) -> None:
        listeners = list(self._listeners.get(user_id, []))
        if listeners:
            self._notify(listeners)

    def _notify(self, listeners: list[_Listener]) -> None:
        user_id = listeners[0].user_id
        try:
            tasks = self.list_tasks(user_id)
        except SQLAlchemyError as exc:
            logger.exception("Failed to load tasks for user %s", user_id)
            message = str(exc) or "Failed to load tasks."
            for listener in listeners:
                if listener.active and listener.on_error is not None:
                    listener.on_error(message)
            return
        for listener in listeners:
            if listener.active:
                listener.on_snapshot(list(tasks))
