"""
Tests for the competition period lifecycle.
"""
import uuid
from datetime import date, datetime, timezone

import pytest

from dishdisplay.models.period import LeaderboardPeriod, PeriodStatus
from dishdisplay.models.points import DinerPoints, EarnedFrom
from dishdisplay.services.leaderboard import get_active_period
from dishdisplay.services.periods import (
    current_week_bounds,
    list_periods,
    manage_periods,
    mark_win_seen,
    unseen_wins,
    week_status,
    winner_history,
)
from dishdisplay.services.profile import get_or_create_profile

# A Wednesday
WEDNESDAY = date(2020, 1, 8)


@pytest.fixture()
def isolated_periods(db, no_active_period):
    """Periods opened by a test are closed again before the real one is restored."""
    yield
    db.expire_all()
    for period in db.query(LeaderboardPeriod).filter(
        LeaderboardPeriod.status == PeriodStatus.active
    ).all():
        period.status = PeriodStatus.closed
    db.commit()


class TestWeekBounds:
    def test_midweek(self):
        assert current_week_bounds(WEDNESDAY) == (date(2020, 1, 6), date(2020, 1, 12))

    def test_monday_and_sunday(self):
        assert current_week_bounds(date(2020, 1, 6)) == (date(2020, 1, 6), date(2020, 1, 12))
        assert current_week_bounds(date(2020, 1, 12)) == (date(2020, 1, 6), date(2020, 1, 12))


class TestWeekStatus:
    period = LeaderboardPeriod(start_date=date(2020, 1, 6), end_date=date(2020, 1, 12))

    @pytest.mark.parametrize("today,expected", [
        (date(2020, 1, 5), "FUTURE"),
        (date(2020, 1, 6), "CURRENT"),
        (date(2020, 1, 12), "CURRENT"),
        (date(2020, 1, 13), "PAST"),
    ])
    def test_status(self, today, expected):
        assert week_status(self.period, today) == expected


class TestManagePeriods:
    def test_opens_current_week_once(self, db, isolated_periods):
        actions = manage_periods(db, today=WEDNESDAY)
        assert [a.action for a in actions] == ["opened"]
        assert actions[0].start_date == date(2020, 1, 6)
        assert actions[0].end_date == date(2020, 1, 12)

        assert manage_periods(db, today=WEDNESDAY) == []
        assert get_active_period(db).id == actions[0].period_id

    def test_closes_expired_period_and_records_winner(self, db, isolated_periods):
        opened = manage_periods(db, today=WEDNESDAY)[0]

        low = get_or_create_profile(db, f"low-{uuid.uuid4().hex[:8]}@example.com")
        high = get_or_create_profile(db, f"high-{uuid.uuid4().hex[:8]}@example.com")
        stamp = datetime(2020, 1, 8, 12, tzinfo=timezone.utc)
        for diner, points in ((low, 10), (high, 35), (low, 10)):
            db.add(DinerPoints(
                diner_id=diner.id,
                leaderboard_period_id=opened.period_id,
                points=points,
                earned_from=EarnedFrom.visit,
                source_id=f"seed:{uuid.uuid4().hex}",
                created_at=stamp,
            ))
        db.commit()

        actions = manage_periods(db, today=date(2020, 1, 13))
        assert [a.action for a in actions] == ["closed", "opened"]
        assert actions[0].winner_email == high.email
        assert actions[1].start_date == date(2020, 1, 13)

        closed = db.get(LeaderboardPeriod, opened.period_id)
        assert closed.status == PeriodStatus.closed
        assert closed.winner_diner_id == high.id
        assert closed.winner_points == 35
        assert closed.closed_at is not None

    def test_closing_empty_period_has_no_winner(self, db, isolated_periods):
        opened = manage_periods(db, today=WEDNESDAY)[0]
        actions = manage_periods(db, today=date(2020, 2, 1))
        assert actions[0].action == "closed"
        assert actions[0].winner_email is None
        assert db.get(LeaderboardPeriod, opened.period_id).winner_diner_id is None

    def test_list_periods_newest_first(self, db, isolated_periods):
        manage_periods(db, today=WEDNESDAY)
        manage_periods(db, today=date(2020, 1, 15))
        periods = list_periods(db, limit=50)
        starts = [p.start_date for p in periods]
        assert starts == sorted(starts, reverse=True)
        assert len(list_periods(db, limit=1)) == 1


def _period_won_by(db):
    """Close a 2020 period where `high` beats `low`. Returns (period_id, high_email, low_email)."""
    opened = manage_periods(db, today=WEDNESDAY)[0]
    high_email = f"high-{uuid.uuid4().hex[:8]}@example.com"
    low_email = f"low-{uuid.uuid4().hex[:8]}@example.com"
    high = get_or_create_profile(db, high_email)
    low = get_or_create_profile(db, low_email)
    stamp = datetime(2020, 1, 8, 12, tzinfo=timezone.utc)
    for diner, points in ((high, 50), (low, 25)):
        db.add(DinerPoints(
            diner_id=diner.id,
            leaderboard_period_id=opened.period_id,
            points=points,
            earned_from=EarnedFrom.review,
            source_id=f"seed:{uuid.uuid4().hex}",
            created_at=stamp,
        ))
    db.commit()
    manage_periods(db, today=date(2020, 1, 13))
    return opened.period_id, high_email, low_email


class TestWinnerHistory:
    def test_history_and_notifications(self, db, isolated_periods):
        period_id, high_email, low_email = _period_won_by(db)

        history = winner_history(db, high_email)
        assert [p.id for p in history] == [period_id]
        assert history[0].winner_points == 50
        assert [p.id for p in unseen_wins(db, high_email)] == [period_id]
        assert winner_history(db, low_email) == []
        assert winner_history(db, "ghost@example.com") == []

        assert mark_win_seen(db, high_email, period_id) is True
        assert unseen_wins(db, high_email) == []
        assert mark_win_seen(db, high_email, period_id) is True
        assert mark_win_seen(db, low_email, period_id) is False

    def test_history_endpoints(self, client, db, isolated_periods):
        period_id, high_email, low_email = _period_won_by(db)
        db.rollback()

        body = client.get("/diners/winner-history", params={"email": high_email}).json()
        assert [w["period_id"] for w in body["history"]] == [period_id]
        assert body["history"][0]["total_points"] == 50
        assert [w["period_id"] for w in body["unseen"]] == [period_id]

        seen = client.post(f"/diners/winner-history/{period_id}/seen", json={"diner_email": high_email})
        assert seen.status_code == 200
        assert seen.json()["seen"] is True

        after = client.get("/diners/winner-history", params={"email": high_email}).json()
        assert after["unseen"] == []

        other = client.post(f"/diners/winner-history/{period_id}/seen", json={"diner_email": low_email})
        assert other.status_code == 404
        assert other.json()["code"] == "WIN_NOT_FOUND"
