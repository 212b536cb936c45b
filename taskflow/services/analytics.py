"""Derived productivity statistics.

Everything here is a pure function of the task snapshot and ``today``; the
result is recomputed from scratch whenever the snapshot changes.
"""
from __future__ import annotations

from datetime import date
from typing import Sequence

from taskflow.domain.dates import (
    MONTH_DAYS,
    STREAK_LOOKBACK_DAYS,
    WEEK_DAYS,
    chart_label,
    date_range,
    yesterday_of,
)
from taskflow.domain.entities import ChartPoint, DerivedStats, TaskEntity, WindowStats
from taskflow.domain.enums import Resolution
from taskflow.domain.resolution import eligible_tasks, resolve


def productivity_percent(completed: int, total: int) -> int:
    if total == 0:
        return 0
    # round half up, in integers: 50.5 -> 51
    return (200 * completed + total) // (2 * total)


def _day_counts(tasks: Sequence[TaskEntity], day: date, today: date) -> tuple[int, int]:
    completed = 0
    missed = 0
    for task in tasks:
        resolution = resolve(task, day, today)
        if resolution == Resolution.COMPLETED:
            completed += 1
        elif resolution == Resolution.MISSED:
            missed += 1
    return completed, missed


def compute_stats(
    tasks: Sequence[TaskEntity], dates: Sequence[date], today: date
) -> WindowStats:
    active = eligible_tasks(tasks)
    completed = 0
    missed = 0
    for day in dates:
        day_completed, day_missed = _day_counts(active, day, today)
        completed += day_completed
        missed += day_missed
    total = completed + missed
    return WindowStats(
        total=total,
        completed=completed,
        missed=missed,
        productivity=productivity_percent(completed, total),
    )


def is_successful_day(tasks: Sequence[TaskEntity], day: date, today: date) -> bool:
    completed, missed = _day_counts(eligible_tasks(tasks), day, today)
    return completed > 0 and missed == 0


def compute_streak(
    tasks: Sequence[TaskEntity],
    today: date,
    lookback_days: int = STREAK_LOOKBACK_DAYS,
) -> int:
    """Count consecutive successful days walking back from ``today``.

    An unsuccessful today or yesterday is skipped rather than ending the
    walk; any older unsuccessful day ends it. Capped at ``lookback_days``.
    """
    active = eligible_tasks(tasks)
    grace = {today, yesterday_of(today)}
    streak = 0
    for day in reversed(date_range(lookback_days, today)):
        if is_successful_day(active, day, today):
            streak += 1
        elif day in grace:
            continue
        else:
            break
    return streak


def build_weekly_series(
    tasks: Sequence[TaskEntity], today: date
) -> tuple[ChartPoint, ...]:
    active = eligible_tasks(tasks)
    points = []
    for day in date_range(WEEK_DAYS, today):
        completed, missed = _day_counts(active, day, today)
        points.append(ChartPoint(date=chart_label(day), completed=completed, missed=missed))
    return tuple(points)


def recompute(tasks: Sequence[TaskEntity], today: date) -> DerivedStats:
    last_week = date_range(WEEK_DAYS, today)
    last_month = date_range(MONTH_DAYS, today)
    return DerivedStats(
        weekly_stats=compute_stats(tasks, last_week, today),
        monthly_stats=compute_stats(tasks, last_month, today),
        streak=compute_streak(tasks, today, STREAK_LOOKBACK_DAYS),
        weekly_chart_data=build_weekly_series(tasks, today),
    )
