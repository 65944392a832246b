"""Tests for GET/POST /api/progress."""


class TestUpdateProgress:
    """Tests for POST /api/progress."""

    def test_two_updates_accumulate(self, client, stored_topic):
        """Two updates accumulate."""
        body = {
            "userId": "u1",
            "topicId": stored_topic.id,
            "conceptsCompleted": 1,
            "xpEarned": 10,
        }

        client.post("/api/progress", json=body)
        response = client.post("/api/progress", json=body)

        assert response.status_code == 200
        progress = response.json()["progress"]
        assert progress["concepts_completed"] == 2
        assert progress["xp_earned"] == 20
        assert progress["streak_days"] == 1
        assert progress["user_id"] == "u1"

    def test_defaults_to_anonymous(self, client, stored_topic):
        """Missing userId records under anonymous."""
        response = client.post(
            "/api/progress", json={"topicId": stored_topic.id, "xpEarned": 5}
        )

        assert response.json()["progress"]["user_id"] == "anonymous"

    def test_missing_topic_id_is_400(self, client):
        """Missing topicId returns 400."""
        response = client.post("/api/progress", json={"userId": "u1"})

        assert response.status_code == 400
        assert response.json() == {"error": "Topic ID is required"}

    def test_unknown_topic_is_400(self, client):
        """Unknown topicId returns 400."""
        response = client.post("/api/progress", json={"topicId": "nope", "xpEarned": 5})

        assert response.status_code == 400
        assert "Unknown topic" in response.json()["error"]

    def test_negative_increment_is_400(self, client, stored_topic):
        """Negative increment returns 400."""
        response = client.post(
            "/api/progress", json={"topicId": stored_topic.id, "xpEarned": -10}
        )

        assert response.status_code == 400


class TestGetProgress:
    """Tests for GET /api/progress."""

    def test_empty_user(self, client):
        """User without progress gets empty rows and zeroed stats."""
        response = client.get("/api/progress", params={"userId": "nobody"})

        assert response.status_code == 200
        data = response.json()
        assert data["progress"] == []
        assert data["stats"]["totalXp"] == 0
        assert data["stats"]["accuracy"] == 0
        assert data["stats"]["level"] == 1
        assert len(data["achievements"]) == 6

    def test_stats_and_embedded_topic(self, client, stored_topic):
        """Rows embed their topic and stats are computed."""
        client.post(
            "/api/progress",
            json={
                "userId": "u1",
                "topicId": stored_topic.id,
                "problemsSolved": 10,
                "problemsCorrect": 7,
                "xpEarned": 150,
            },
        )

        data = client.get("/api/progress", params={"userId": "u1"}).json()

        assert data["progress"][0]["topic"]["name"] == "Recursion"
        stats = data["stats"]
        assert stats["totalXp"] == 150
        assert stats["totalProblems"] == 10
        assert stats["accuracy"] == 70
        assert stats["topicsStudied"] == 1
        assert stats["level"] == 2
        assert stats["levelXp"] == 50
        unlocked = {a["name"] for a in data["achievements"] if a["unlocked"]}
        assert unlocked == {"First Steps", "Problem Solver", "XP Hunter"}
