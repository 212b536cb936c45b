from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class StreakTier:
    min_days: int
    name: str
    subtitle: str


TIERS: tuple[StreakTier, ...] = (
    StreakTier(0, "Spark", "Start your streak"),
    StreakTier(3, "Flame", "3-day momentum"),
    StreakTier(7, "Blaze", "1 week strong"),
    StreakTier(14, "Comet", "2 weeks locked in"),
    StreakTier(30, "Legend", "30-day master"),
)


def pick_tier(days: int) -> StreakTier:
    current = TIERS[0]
    for tier in TIERS:
        if days >= tier.min_days:
            current = tier
    return current


def next_tier(tier: StreakTier) -> StreakTier | None:
    return next((t for t in TIERS if t.min_days > tier.min_days), None)


def progress_to_next(days: int) -> int:
    tier = pick_tier(days)
    upcoming = next_tier(tier)
    if upcoming is None:
        return 100
    span = upcoming.min_days - tier.min_days
    into = max(0, days - tier.min_days)
    return max(0, min(100, round(into * 100 / span)))
