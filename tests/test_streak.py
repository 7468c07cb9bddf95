"""
Tests for visit streaks: first visit, same day, consecutive days, and a
broken streak. `today` is fixed.
"""
from datetime import date, timedelta

from dishdisplay.services.streak import longest_streak, update_streak

TODAY = date(2026, 10, 19)


def test_first_visit_starts_streak():
    s = update_streak(None, 0, today=TODAY)
    assert (s.new_streak, s.bonus_points, s.is_new_streak) == (1, 0, True)


def test_same_day_keeps_streak():
    s = update_streak(TODAY, 2, today=TODAY)
    assert (s.new_streak, s.bonus_points, s.is_new_streak) == (2, 0, False)


def test_same_day_on_long_streak_pays_no_bonus():
    s = update_streak(TODAY, 5, today=TODAY)
    assert s.bonus_points == 0


def test_progression_and_break():
    yesterday = TODAY - timedelta(days=1)

    first = update_streak(None, 0, today=TODAY)
    assert (first.new_streak, first.bonus_points, first.is_new_streak) == (1, 0, True)

    second = update_streak(yesterday, 1, today=TODAY)
    assert (second.new_streak, second.bonus_points, second.is_new_streak) == (2, 0, False)

    third = update_streak(yesterday, 2, today=TODAY)
    assert (third.new_streak, third.bonus_points, third.is_new_streak) == (3, 15, False)

    broken = update_streak(TODAY - timedelta(days=3), 3, today=TODAY)
    assert (broken.new_streak, broken.bonus_points, broken.is_new_streak) == (1, 0, True)


def test_bonus_every_day_past_threshold():
    s = update_streak(TODAY - timedelta(days=1), 7, today=TODAY)
    assert s.new_streak == 8
    assert s.bonus_points == 15


def test_two_day_gap_resets():
    s = update_streak(TODAY - timedelta(days=2), 4, today=TODAY)
    assert s.new_streak == 1
    assert s.is_new_streak is True


def test_longest_streak_tracks_max():
    assert longest_streak(5, 3) == 5
    assert longest_streak(2, 3) == 3
