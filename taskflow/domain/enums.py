from __future__ import annotations

from enum import StrEnum


class TaskFrequency(StrEnum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class CompletionStatus(StrEnum):
    COMPLETED = "completed"
    MISSED = "missed"


class Resolution(StrEnum):
    EXCLUDED = "excluded"
    COMPLETED = "completed"
    MISSED = "missed"
    PENDING = "pending"


# today's record: unmarked -> completed -> missed -> unmarked
TODAY_CYCLE: dict[CompletionStatus | None, CompletionStatus | None] = {
    None: CompletionStatus.COMPLETED,
    CompletionStatus.COMPLETED: CompletionStatus.MISSED,
    CompletionStatus.MISSED: None,
}


def next_today_status(current: CompletionStatus | None) -> CompletionStatus | None:
    return TODAY_CYCLE[current]
