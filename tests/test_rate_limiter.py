"""
Tests for the anti-spam rules: visit cooldown, the three review gates in
order, and review content validation. `now` is fixed; no DB.
"""
from datetime import datetime, timedelta, timezone

import pytest

from dishdisplay.services.rate_limiter import (
    check_review_rate_limit,
    check_visit_rate_limit,
    validate_review_content,
)

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


class TestVisitRateLimit:
    def test_first_visit_allowed(self):
        result = check_visit_rate_limit(None, now=NOW)
        assert result.allowed is True
        assert result.reason is None

    def test_exactly_24_hours_allowed(self):
        assert check_visit_rate_limit(NOW - timedelta(hours=24), now=NOW).allowed is True

    def test_one_minute_short_denied_with_one_hour(self):
        result = check_visit_rate_limit(NOW - timedelta(hours=23, minutes=59), now=NOW)
        assert result.allowed is False
        assert result.retry_after == 1
        assert result.can_retry is True
        assert "Try again in 1 hour." in result.reason

    def test_plural_hours_in_message(self):
        result = check_visit_rate_limit(NOW - timedelta(hours=2), now=NOW)
        assert result.retry_after == 22
        assert "22 hours" in result.reason

    def test_just_logged_rounds_up_to_24(self):
        result = check_visit_rate_limit(NOW - timedelta(seconds=5), now=NOW)
        assert result.retry_after == 24


class TestReviewRateLimit:
    RECENT_VISIT = NOW - timedelta(days=1)

    def test_all_gates_pass(self):
        assert check_review_rate_limit(None, 0, self.RECENT_VISIT, now=NOW).allowed is True

    def test_cooldown_exactly_seven_days_allowed(self):
        result = check_review_rate_limit(NOW - timedelta(days=7), 0, self.RECENT_VISIT, now=NOW)
        assert result.allowed is True

    def test_cooldown_six_days_denied(self):
        result = check_review_rate_limit(NOW - timedelta(days=6), 0, self.RECENT_VISIT, now=NOW)
        assert result.allowed is False
        assert result.retry_after == 24
        assert result.can_retry is True
        assert "Try again in 1 day." in result.reason

    def test_cooldown_plural_days(self):
        result = check_review_rate_limit(NOW - timedelta(days=2), 0, self.RECENT_VISIT, now=NOW)
        assert result.retry_after == 5 * 24
        assert "5 days" in result.reason

    def test_daily_cap_reached(self):
        result = check_review_rate_limit(None, 3, self.RECENT_VISIT, now=NOW)
        assert result.allowed is False
        assert result.can_retry is True
        assert result.retry_after is None
        assert "3 reviews per day" in result.reason

    def test_two_reviews_today_still_allowed(self):
        assert check_review_rate_limit(None, 2, self.RECENT_VISIT, now=NOW).allowed is True

    def test_cap_applies_when_cooldown_clear(self):
        result = check_review_rate_limit(NOW - timedelta(days=30), 3, self.RECENT_VISIT, now=NOW)
        assert result.allowed is False
        assert "per day" in result.reason

    def test_cooldown_checked_before_cap(self):
        result = check_review_rate_limit(NOW - timedelta(days=1), 5, None, now=NOW)
        assert "every 7 days" in result.reason

    def test_no_visit_cannot_retry(self):
        result = check_review_rate_limit(None, 0, None, now=NOW)
        assert result.allowed is False
        assert result.can_retry is False
        assert "log a visit first" in result.reason

    def test_cap_checked_before_visit_requirement(self):
        result = check_review_rate_limit(None, 3, None, now=NOW)
        assert result.can_retry is True

    def test_visit_exactly_30_days_allowed(self):
        assert check_review_rate_limit(None, 0, NOW - timedelta(days=30), now=NOW).allowed is True

    def test_visit_older_than_30_days_denied(self):
        result = check_review_rate_limit(
            None, 0, NOW - timedelta(days=30, seconds=1), now=NOW
        )
        assert result.allowed is False
        assert result.can_retry is False


class TestReviewContent:
    @pytest.mark.parametrize("rating", [1, 3, 5])
    def test_valid_ratings(self, rating):
        assert validate_review_content(rating, "fine").valid is True

    @pytest.mark.parametrize("rating", [0, 6, -1])
    def test_rating_out_of_range(self, rating):
        result = validate_review_content(rating, None)
        assert result.valid is False
        assert result.field == "rating"

    def test_text_at_limit_allowed(self):
        assert validate_review_content(4, "x" * 1000).valid is True

    def test_text_over_limit(self):
        result = validate_review_content(4, "x" * 1001)
        assert result.valid is False
        assert result.field == "review_text"
        assert "1000" in result.reason

    def test_empty_text_allowed(self):
        assert validate_review_content(4, "").valid is True
