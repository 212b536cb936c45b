from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from .db import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class TaskModel(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(128), nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    frequency = Column(String(20), nullable=False, default="daily")
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    active = Column(Boolean, nullable=False, default=True)

    completions = relationship(
        "CompletionModel",
        cascade="all, delete-orphan",
        order_by="CompletionModel.day",
    )


class CompletionModel(Base):
    __tablename__ = "task_completions"
    __table_args__ = (UniqueConstraint("task_id", "day", name="uq_task_completions_task_day"),)

    id = Column(Integer, primary_key=True)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    day = Column(Date, nullable=False)
    status = Column(String(20), nullable=False)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
