"""
Visit streaks: consecutive local calendar days with at least one visit to
any restaurant.

  same day        streak unchanged, no bonus
  next day        streak + 1; +15 bonus once the streak reaches 3 (every day)
  2+ day gap      streak restarts at 1

The caller keeps longest_streak in step via `longest_streak()`.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


STREAK_BONUS_THRESHOLD = 3
STREAK_BONUS_POINTS = 15


@dataclass
class StreakUpdate:
    new_streak: int
    bonus_points: int
    is_new_streak: bool


def update_streak(
    last_visit_date: Optional[date],
    current_streak: int,
    *,
    today: date,
) -> StreakUpdate:
    if last_visit_date is None:
        return StreakUpdate(new_streak=1, bonus_points=0, is_new_streak=True)

    diff_days = (today - last_visit_date).days

    if diff_days == 0:
        return StreakUpdate(new_streak=current_streak, bonus_points=0, is_new_streak=False)

    if diff_days == 1:
        new_streak = current_streak + 1
        bonus = STREAK_BONUS_POINTS if new_streak >= STREAK_BONUS_THRESHOLD else 0
        return StreakUpdate(new_streak=new_streak, bonus_points=bonus, is_new_streak=False)

    # Gap of two or more days. A last_visit_date in the future (clock skew)
    # also lands here and restarts the streak.
    return StreakUpdate(new_streak=1, bonus_points=0, is_new_streak=True)


def longest_streak(previous_longest: int, new_streak: int) -> int:
    return max(previous_longest, new_streak)
