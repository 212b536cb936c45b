from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Mapping

from .enums import CompletionStatus, TaskFrequency


@dataclass(frozen=True)
class TaskEntity:
    id: int | None
    title: str
    description: str
    frequency: TaskFrequency
    created_at: datetime
    active: bool = True
    completions: Mapping[date, CompletionStatus] = field(default_factory=dict)

    @property
    def created_date(self) -> date:
        return self.created_at.date()

    def status_on(self, day: date) -> CompletionStatus | None:
        return self.completions.get(day)


@dataclass(frozen=True)
class WindowStats:
    total: int = 0
    completed: int = 0
    missed: int = 0
    productivity: int = 0


@dataclass(frozen=True)
class ChartPoint:
    date: str
    completed: int
    missed: int


@dataclass(frozen=True)
class DerivedStats:
    weekly_stats: WindowStats = field(default_factory=WindowStats)
    monthly_stats: WindowStats = field(default_factory=WindowStats)
    streak: int = 0
    weekly_chart_data: tuple[ChartPoint, ...] = ()
