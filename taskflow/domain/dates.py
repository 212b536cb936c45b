from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

WEEK_DAYS = 7
MONTH_DAYS = 30
STREAK_LOOKBACK_DAYS = 30


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def date_range(days: int, today: date) -> list[date]:
    """Return ``days`` consecutive dates, oldest first, ending at ``today``."""
    return [today - timedelta(days=offset) for offset in range(days - 1, -1, -1)]


def yesterday_of(today: date) -> date:
    return today - timedelta(days=1)


def format_day(day: date) -> str:
    return day.isoformat()


def chart_label(day: date) -> str:
    return day.strftime("%m-%d")
