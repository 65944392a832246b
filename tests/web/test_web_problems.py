"""Tests for POST /api/problems."""


class TestProblemsEndpoint:
    """Tests for POST /api/problems."""

    def test_missing_topic_is_400(self, client, mock_llm):
        """Missing topic returns 400."""
        response = client.post("/api/problems", json={"topicId": "t"})

        assert response.status_code == 400
        assert response.json() == {"error": "Topic is required"}
        mock_llm.simple_json.assert_not_called()

    def test_preview_without_topic_id(self, client, mock_llm, problems_reply):
        """Without topicId problems are previewed."""
        mock_llm.simple_json.return_value = problems_reply

        response = client.post("/api/problems", json={"topic": "Sorting"})

        assert response.status_code == 200
        data = response.json()
        assert data["cached"] is False
        assert len(data["problems"]) == 5
        assert data["problems"][0]["id"] is None

    def test_defaults_to_medium(self, client, mock_llm, problems_reply):
        """Difficulty defaults to medium."""
        mock_llm.simple_json.return_value = problems_reply

        client.post("/api/problems", json={"topic": "Sorting"})

        _, user_prompt = mock_llm.simple_json.call_args.args
        assert "medium difficulty" in user_prompt

    def test_stored_then_cached(self, client, mock_llm, stored_topic, problems_reply):
        """Stored problems serve the next request."""
        mock_llm.simple_json.return_value = problems_reply
        body = {"topic": "Recursion", "topicId": stored_topic.id, "difficulty": "medium"}

        first = client.post("/api/problems", json=body).json()
        second = client.post("/api/problems", json=body).json()

        assert first["cached"] is False
        assert second["cached"] is True
        assert [p["id"] for p in second["problems"]] == [p["id"] for p in first["problems"]]
        mock_llm.simple_json.assert_called_once()

    def test_count_out_of_range_is_400(self, client, mock_llm):
        """Count outside 1 to 20 returns 400."""
        response = client.post("/api/problems", json={"topic": "Sorting", "count": 50})

        assert response.status_code == 400
        mock_llm.simple_json.assert_not_called()

    def test_unknown_difficulty_is_400(self, client):
        """Unknown difficulty returns 400."""
        response = client.post(
            "/api/problems", json={"topic": "Sorting", "difficulty": "impossible"}
        )

        assert response.status_code == 400

    def test_short_reply_is_500(self, client, mock_llm, problems_reply):
        """Reply with too few problems returns 500."""
        problems_reply["problems"] = problems_reply["problems"][:2]
        mock_llm.simple_json.return_value = problems_reply

        response = client.post("/api/problems", json={"topic": "Sorting"})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to generate problems"}
