"""Tests for POST /api/reflection."""


class TestReflectionEndpoint:
    """Tests for POST /api/reflection."""

    def test_returns_camel_case_reflection(self, client, mock_llm, reflection_reply):
        """Reflection is returned in camelCase."""
        mock_llm.simple_json.return_value = reflection_reply

        response = client.post(
            "/api/reflection",
            json={
                "topic": "Binary Search",
                "problemsSolved": 10,
                "problemsCorrect": 7,
                "conceptsCompleted": 3,
                "timeSpent": "12 min",
            },
        )

        assert response.status_code == 200
        reflection = response.json()["reflection"]
        assert reflection["summary"] == "You worked through binary search."
        assert reflection["nextSteps"] == ["Try interpolation search"]
        assert reflection["xpEarned"] == 95

    def test_time_spent_may_be_a_number(self, client, mock_llm, reflection_reply):
        """timeSpent may be a number."""
        mock_llm.simple_json.return_value = reflection_reply

        response = client.post("/api/reflection", json={"topic": "Graphs", "timeSpent": 720})

        assert response.status_code == 200
        _, user_prompt = mock_llm.simple_json.call_args.args
        assert "720" in user_prompt

    def test_reflection_is_not_stored(self, client, mock_llm, reflection_reply, services):
        """Reflections are not stored."""
        mock_llm.simple_json.return_value = reflection_reply

        client.post("/api/reflection", json={"topic": "Graphs", "userId": "u1"})

        assert services.progress.list_for_user("u1") == []

    def test_missing_topic_is_400(self, client, mock_llm):
        """Missing topic returns 400."""
        response = client.post("/api/reflection", json={"problemsSolved": 1})

        assert response.status_code == 400
        mock_llm.simple_json.assert_not_called()

    def test_llm_failure_is_500(self, client, mock_llm):
        """LLM failure returns 500."""
        mock_llm.simple_json.return_value = {"strengths": []}

        response = client.post("/api/reflection", json={"topic": "Graphs"})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to generate reflection"}
