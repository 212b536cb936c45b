from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Sequence

from taskflow.domain.dates import MONTH_DAYS, date_range, format_day
from taskflow.domain.entities import TaskEntity
from taskflow.domain.enums import Resolution
from taskflow.domain.resolution import eligible_tasks, resolve

CSV_HEADERS = ["date", "task_title", "frequency", "status"]
LINE_TERMINATOR = "\r\n"


def _quote(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def usage_rows(tasks: Sequence[TaskEntity], today: date) -> list[list[str]]:
    rows = []
    active = eligible_tasks(tasks)
    for day in date_range(MONTH_DAYS, today):
        for task in active:
            resolution = resolve(task, day, today)
            if resolution == Resolution.EXCLUDED:
                continue
            rows.append([
                format_day(day),
                task.title,
                str(task.frequency),
                resolution.value,
            ])
    return rows


def format_usage_csv(tasks: Sequence[TaskEntity], streak: int, today: date) -> str:
    lines = [f"streak_days,{streak}", "", ",".join(CSV_HEADERS)]
    for day, title, frequency, status in usage_rows(tasks, today):
        lines.append(",".join([day, _quote(title), frequency, status]))
    return LINE_TERMINATOR.join(lines)


def usage_filename(today: date) -> str:
    return f"taskflow-usage-{format_day(today)}.csv"


def write_usage_csv(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="", encoding="utf-8") as handle:
        handle.write(text)
    return path
