"""Tests for the HTTP API."""

from datetime import date, timedelta

import pytest

TODAY = date(2025, 3, 10)


@pytest.fixture
def user_id(client):
    response = client.post("/users", json={
        "name": "Ada",
        "email": "ada@example.com",
        "age": 34,
        "sex": "female",
        "health_goals": ["sleep", "stress_anxiety"],
        "medications": ["Warfarin 5mg"],
    })
    assert response.status_code == 200
    return response.json()["id"]


@pytest.fixture
def plan(client, user_id):
    response = client.post(f"/plans/{user_id}")
    assert response.status_code == 200
    return response.json()


def _scores(**overrides):
    scores = {
        "sleep_score": 50,
        "energy_score": 50,
        "clarity_score": 50,
        "mood_score": 50,
        "gut_score": 50,
    }
    scores.update(overrides)
    return scores


class TestUsers:
    """Tests for user endpoints."""

    def test_create_and_get(self, client, user_id):
        response = client.get(f"/users/{user_id}")

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Ada"
        assert data["sex"] == "female"
        assert data["health_goals"] == ["sleep", "stress_anxiety"]
        assert data["baselines"]["sleep"] == 50

    def test_duplicate_email(self, client, user_id):
        response = client.post("/users", json={"name": "Other", "email": "ada@example.com", "age": 40})
        assert response.status_code == 400

    def test_unknown_goal_rejected(self, client):
        response = client.post("/users", json={"name": "Bo", "age": 40, "health_goals": ["telepathy"]})
        assert response.status_code == 422

    def test_unknown_user(self, client):
        assert client.get("/users/missing").status_code == 404

    def test_update(self, client, user_id):
        response = client.patch(f"/users/{user_id}", json={"coffee_cups_daily": 2, "baseline_sleep": 40})

        assert response.status_code == 200
        assert response.json()["coffee_cups_daily"] == 2
        assert response.json()["baselines"]["sleep"] == 40
        assert response.json()["name"] == "Ada"


class TestPlans:
    """Tests for plan endpoints."""

    def test_generate(self, plan):
        names = [s["name"] for s in plan["supplements"]]

        assert plan["version"] == 1
        assert plan["is_active"] is True
        assert "Magnesium Glycinate" in names
        assert plan["ai_reasoning"]

    def test_no_plan_yet(self, client, user_id):
        assert client.get(f"/plans/{user_id}").status_code == 404

    def test_regenerate_bumps_version(self, client, user_id, plan):
        client.post(f"/plans/{user_id}")
        response = client.get(f"/plans/{user_id}")

        assert response.json()["version"] == 2
        assert response.json()["id"] != plan["id"]

    def test_remove_and_readd(self, client, user_id, plan):
        item = plan["supplements"][0]

        removed = client.delete(f"/plans/{user_id}/supplements/{item['id']}")
        assert removed.status_code == 200
        assert removed.json()["is_included"] is False

        current = client.get(f"/plans/{user_id}").json()
        line = next(s for s in current["supplements"] if s["id"] == item["id"])
        assert line["is_included"] is False

        readded = client.post(f"/plans/{user_id}/supplements", json={"name": item["name"]})
        assert readded.status_code == 200
        assert readded.json()["id"] == item["id"]
        assert readded.json()["is_included"] is True

    def test_remove_unknown(self, client, user_id, plan):
        assert client.delete(f"/plans/{user_id}/supplements/missing").status_code == 404

    def test_add_supplement(self, client, user_id, plan):
        response = client.post(f"/plans/{user_id}/supplements", json={"name": "vitamin c"})

        assert response.status_code == 200
        assert response.json()["name"] == "Vitamin C"
        assert response.json()["dosage"] == "1g"

        current = client.get(f"/plans/{user_id}").json()
        assert "Vitamin C" in [s["name"] for s in current["supplements"]]

    def test_add_blocked_by_medication(self, client, user_id, plan):
        response = client.post(f"/plans/{user_id}/supplements", json={"name": "Omega-3 (EPA/DHA)"})
        assert response.status_code == 409

    def test_add_unknown(self, client, user_id, plan):
        response = client.post(f"/plans/{user_id}/supplements", json={"name": "Unobtainium"})
        assert response.status_code == 404


class TestCheckIns:
    """Tests for check-in endpoints."""

    def test_submit(self, client, user_id, plan):
        item_id = plan["supplements"][0]["id"]
        response = client.post(f"/checkins/{user_id}", json={
            **_scores(sleep_score=70),
            "check_in_date": str(TODAY),
            "taken_supplement_ids": [item_id],
        })

        assert response.status_code == 200
        data = response.json()
        assert data["streak"]["current_streak"] == 1
        assert data["check_in"]["wellbeing_score"] == pytest.approx(54.0)
        assert data["check_in"]["wellbeing_completed"] is True
        assert data["insight"]["key"] == "above_baseline_sleep"

        logs = {log["plan_supplement_id"]: log["taken"] for log in data["check_in"]["supplement_logs"]}
        assert logs[item_id] is True
        assert len(logs) == len(plan["supplements"])

    def test_score_out_of_range(self, client, user_id):
        response = client.post(f"/checkins/{user_id}", json=_scores(mood_score=150))
        assert response.status_code == 400

    def test_streak_and_history(self, client, user_id):
        for offset in range(2):
            day = TODAY + timedelta(days=offset)
            response = client.post(f"/checkins/{user_id}", json={
                **_scores(sleep_score=70),
                "check_in_date": str(day),
            })
            assert response.status_code == 200

        second = response.json()
        assert second["streak"]["current_streak"] == 2
        # Shown yesterday, so not repeated
        assert second["insight"]["key"] != "above_baseline_sleep"

        history = client.get(f"/checkins/{user_id}").json()
        assert [c["date"] for c in history] == [str(TODAY + timedelta(days=1)), str(TODAY)]

        streak = client.get(f"/checkins/{user_id}/streak").json()
        assert streak["longest_streak"] == 2
        assert streak["last_check_in_date"] == str(TODAY + timedelta(days=1))

    def test_resubmit_same_day(self, client, user_id):
        client.post(f"/checkins/{user_id}", json={**_scores(), "check_in_date": str(TODAY)})
        response = client.post(f"/checkins/{user_id}", json={**_scores(gut_score=90), "check_in_date": str(TODAY)})

        assert response.json()["streak"]["current_streak"] == 1
        history = client.get(f"/checkins/{user_id}").json()
        assert len(history) == 1
        assert history[0]["gut_score"] == 90

    def test_log_supplement(self, client, user_id, plan):
        item_id = plan["supplements"][0]["id"]
        response = client.put(
            f"/checkins/{user_id}/supplements/{item_id}",
            json={"taken": True, "check_in_date": str(TODAY)},
        )

        assert response.status_code == 200
        assert response.json()["wellbeing_completed"] is False
        assert response.json()["supplement_logs"] == [{"plan_supplement_id": item_id, "taken": True}]

    def test_log_unknown_supplement(self, client, user_id, plan):
        response = client.put(f"/checkins/{user_id}/supplements/missing", json={"taken": True})
        assert response.status_code == 404


class TestInsights:
    """Tests for the insight feed."""

    def test_feed_read_and_dismiss(self, client, user_id):
        client.post(f"/checkins/{user_id}", json={**_scores(sleep_score=70), "check_in_date": str(TODAY)})

        feed = client.get(f"/insights/{user_id}").json()
        assert len(feed) == 1
        insight = feed[0]
        assert insight["key"] == "above_baseline_sleep"
        assert insight["type"] == "trend"
        assert insight["data_points_used"] == 1

        read = client.post(f"/insights/{user_id}/{insight['id']}/read")
        assert read.json()["is_read"] is True

        client.post(f"/insights/{user_id}/{insight['id']}/dismiss")
        assert client.get(f"/insights/{user_id}").json() == []
        assert len(client.get(f"/insights/{user_id}?include_dismissed=true").json()) == 1

    def test_unknown_insight(self, client, user_id):
        assert client.post(f"/insights/{user_id}/missing/read").status_code == 404


class TestCatalogEndpoints:
    """Tests for catalog endpoints."""

    def test_list_supplements(self, client):
        assert len(client.get("/catalog/supplements").json()["supplements"]) == 20

        minerals = client.get("/catalog/supplements?category=mineral").json()["supplements"]
        assert sorted(s["name"] for s in minerals) == ["Iron", "Magnesium Glycinate", "Zinc"]

    def test_goal_supplements(self, client):
        data = client.get("/catalog/goals/sleep").json()

        assert data["label"] == "Better sleep"
        assert data["supplements"][0] == {"name": "Magnesium Glycinate", "weight": 3}

    def test_unknown_goal(self, client):
        assert client.get("/catalog/goals/telepathy").status_code == 404

    def test_exclusions(self, client):
        data = client.post("/catalog/exclusions", json={"medications": ["Coumadin"]}).json()

        assert "Omega-3 (EPA/DHA)" in data["excluded"]
        assert "CoQ10" in data["excluded"]
        assert "warfarin" in data["medication_keywords"]


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}
