"""
Integration tests for API endpoints using the SQLite test database.
"""
import uuid

REVIEW_TEXT = "Best mole in town, the tortillas are made fresh."


def _visit(client, email, restaurant_id, **extra):
    return client.post("/diners/visits", json={
        "diner_email": email, "restaurant_id": restaurant_id, **extra,
    })


class TestHealth:
    def test_health(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "ok"


class TestVisits:
    def test_log_visit(self, client, active_period, email, restaurant_id):
        r = _visit(client, email, restaurant_id, display_name="Ana")
        assert r.status_code == 201
        body = r.json()
        assert body["points_earned"] == 10
        assert body["points"]["base_points"] == 10
        assert body["streak"]["new_streak"] == 1
        assert body["period_points_awarded"] is True
        assert body["visit"]["restaurant_id"] == restaurant_id
        assert body["visit"]["notes"] == "Visited via QR code menu"

    def test_repeat_visit_rate_limited(self, client, active_period, email, restaurant_id):
        _visit(client, email, restaurant_id)
        r = _visit(client, email, restaurant_id)
        assert r.status_code == 429
        body = r.json()
        assert body["code"] == "RATE_LIMITED"
        assert body["details"] == {"can_retry": True, "retry_after": 24}
        assert "24 hours" in body["message"]

    def test_email_is_case_insensitive(self, client, active_period, email, restaurant_id):
        _visit(client, email.upper(), restaurant_id)
        r = client.get("/diners/visits", params={"email": email})
        assert r.status_code == 200
        assert len(r.json()) == 1

    def test_history_unknown_diner(self, client):
        r = client.get("/diners/visits", params={"email": "ghost@example.com"})
        assert r.status_code == 404


class TestReviews:
    def test_review_flow(self, client, active_period, email, restaurant_id):
        _visit(client, email, restaurant_id)
        r = client.post("/diners/reviews", json={
            "diner_email": email,
            "restaurant_id": restaurant_id,
            "rating": 5,
            "review_text": REVIEW_TEXT,
            "photo_urls": ["https://cdn.example.com/1.jpg"],
        })
        assert r.status_code == 201
        body = r.json()
        assert body["points"]["total_points"] == 40
        assert body["points"]["bonuses"] == ["+10 for detailed review", "+5 for 1 photo"]
        review_id = body["review"]["id"]

        again = client.post("/diners/reviews", json={
            "diner_email": email, "restaurant_id": restaurant_id, "rating": 4,
        })
        assert again.status_code == 429
        assert again.json()["details"]["retry_after"] == 168

        listed = client.get(f"/restaurants/{restaurant_id}/reviews")
        assert [rv["id"] for rv in listed.json()] == [review_id]

        patched = client.patch(f"/diners/reviews/{review_id}", json={
            "diner_email": email, "rating": 3,
        })
        assert patched.status_code == 200
        assert patched.json()["rating"] == 3
        assert patched.json()["points_earned"] == 40

        profile = client.get("/diners/profile", params={"email": email}).json()
        assert profile["total_points"] == 50
        assert profile["total_reviews"] == 1

        assert client.delete(f"/diners/reviews/{review_id}", params={"email": email}).status_code == 204
        assert client.get("/diners/reviews", params={"email": email}).json() == []

    def test_edit_by_other_diner_forbidden(self, client, active_period, email, restaurant_id):
        _visit(client, email, restaurant_id)
        review_id = client.post("/diners/reviews", json={
            "diner_email": email, "restaurant_id": restaurant_id, "rating": 5,
        }).json()["review"]["id"]

        other = f"other-{uuid.uuid4().hex[:8]}@example.com"
        _visit(client, other, restaurant_id)
        r = client.patch(f"/diners/reviews/{review_id}", json={"diner_email": other, "rating": 1})
        assert r.status_code == 403
        assert r.json()["code"] == "REVIEW_NOT_OWNED"


class TestProfile:
    COMPLETE = {
        "profile_photo_url": "https://cdn.example.com/me.jpg",
        "bio": "Taco hunter since 2019.",
        "dietary_preferences": "vegetarian",
        "location": "Austin, TX",
    }

    def test_completion_bonus_paid_once(self, client, active_period, email, restaurant_id):
        _visit(client, email, restaurant_id)

        partial = client.patch("/diners/profile", json={"diner_email": email, "bio": "Taco hunter since 2019."})
        assert partial.status_code == 200
        assert partial.json()["completion"]["completion_percentage"] == 25
        assert partial.json()["bonus_points_awarded"] == 0

        full = client.patch("/diners/profile", json={"diner_email": email, **self.COMPLETE})
        body = full.json()
        assert body["bonus_points_awarded"] == 25
        assert body["completion"]["is_complete"] is True
        assert body["completion"]["bonus_awarded"] is True
        assert body["profile"]["total_points"] == 35

        again = client.patch("/diners/profile", json={"diner_email": email, "location": "Dallas, TX"})
        assert again.json()["bonus_points_awarded"] == 0
        assert again.json()["profile"]["total_points"] == 35
        assert again.json()["profile"]["bio"] == "Taco hunter since 2019."

        completion = client.get("/diners/profile-completion", params={"email": email}).json()
        assert completion["completion_percentage"] == 100
        assert completion["missing_fields"] == []
        assert completion["bonus_points"] == 0

    def test_completion_missing_fields(self, client, active_period, email, restaurant_id):
        _visit(client, email, restaurant_id)
        r = client.get("/diners/profile-completion", params={"email": email})
        assert r.status_code == 200
        body = r.json()
        assert body["completion_percentage"] == 0
        assert body["missing_fields"] == ["profile_photo_url", "bio", "dietary_preferences", "location"]

    def test_streak(self, client, active_period, email, restaurant_id):
        _visit(client, email, restaurant_id)
        body = client.get("/diners/streak", params={"email": email}).json()
        assert body["current_streak"] == 1
        assert body["longest_streak"] == 1
        assert body["bonus_active"] is False
        assert body["last_visit_date"] is not None

    def test_streak_unknown_diner_is_zero(self, client):
        body = client.get("/diners/streak", params={"email": "ghost@example.com"}).json()
        assert body == {
            "current_streak": 0,
            "longest_streak": 0,
            "last_visit_date": None,
            "bonus_active": False,
        }


class TestLeaderboard:
    def test_anonymous_sees_no_entries(self, client, active_period, email, restaurant_id):
        _visit(client, email, restaurant_id)
        r = client.get("/leaderboard")
        assert r.status_code == 200
        body = r.json()
        assert body["top_entries"] == []
        assert body["current_user_entry"] is None
        assert body["total_participants"] >= 1
        assert body["current_period"]["id"] == active_period.id

    def test_identified_sees_own_rank(self, client, active_period, email, restaurant_id):
        _visit(client, email, restaurant_id)
        body = client.get("/leaderboard", params={"email": email}).json()
        mine = [e for e in body["top_entries"] if e["is_current_user"]]
        if body["current_user_entry"] is not None:
            mine.append(body["current_user_entry"])
        assert len(mine) == 1
        assert mine[0]["total_points"] == 10
        assert len(body["top_entries"]) <= 10
        assert "diner_email" not in mine[0]

    def test_new_points_show_up_immediately(self, client, active_period, email, restaurant_id):
        client.get("/leaderboard", params={"email": email})
        _visit(client, email, restaurant_id)
        body = client.get("/leaderboard", params={"email": email}).json()
        entries = body["top_entries"] + [body["current_user_entry"] or {}]
        assert any(e.get("is_current_user") for e in entries)


class TestPeriods:
    def test_list_periods(self, client, active_period):
        r = client.get("/periods")
        assert r.status_code == 200
        body = r.json()
        current = [p for p in body["periods"] if p["id"] == active_period.id]
        assert current and current[0]["week_status"] == "CURRENT"
        assert current[0]["status"] == "active"

    def test_manage_is_idempotent(self, client, active_period):
        r = client.post("/periods/manage")
        assert r.status_code == 200
        assert r.json() == {"actions": []}


class TestCompetition:
    def test_current_points(self, client, active_period, email, restaurant_id):
        _visit(client, email, restaurant_id)
        r = client.get("/diners/current-points", params={"email": email})
        assert r.status_code == 200
        body = r.json()
        assert body["total_points"] == 10
        assert body["period"]["id"] == active_period.id

    def test_current_points_unknown_diner(self, client, active_period):
        r = client.get("/diners/current-points", params={"email": "ghost@example.com"})
        assert r.json()["total_points"] == 0

    def test_winner_history_empty(self, client, email):
        r = client.get("/diners/winner-history", params={"email": email})
        assert r.status_code == 200
        assert r.json() == {"history": [], "unseen": []}
