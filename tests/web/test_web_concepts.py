"""Tests for POST /api/concepts."""

from skillforge.llm.client import LLMConnectionError


class TestConceptsEndpoint:
    """Tests for POST /api/concepts."""

    def test_missing_topic_is_400(self, client, mock_llm):
        """Missing topic returns 400."""
        response = client.post("/api/concepts", json={})

        assert response.status_code == 400
        assert response.json() == {"error": "Topic is required"}
        mock_llm.simple_json.assert_not_called()

    def test_blank_topic_is_400(self, client, mock_llm):
        """Blank topic returns 400."""
        response = client.post("/api/concepts", json={"topic": "   "})

        assert response.status_code == 400
        mock_llm.simple_json.assert_not_called()

    def test_cache_miss_generates_five_concepts(self, client, mock_llm, concepts_reply):
        """Cache miss generates five concepts."""
        mock_llm.simple_json.return_value = concepts_reply

        response = client.post("/api/concepts", json={"topic": "Binary Search"})

        assert response.status_code == 200
        data = response.json()
        assert data["cached"] is False
        assert data["topic"]["name"] == "Binary Search"
        assert [c["order_index"] for c in data["concepts"]] == [0, 1, 2, 3, 4]
        assert all(c["topic_id"] == data["topic"]["id"] for c in data["concepts"])

    def test_cache_hit_makes_no_llm_call(self, client, mock_llm, stored_topic):
        """Cache hit makes no LLM call."""
        response = client.post("/api/concepts", json={"topic": "recursion"})

        assert response.status_code == 200
        data = response.json()
        assert data["cached"] is True
        assert data["topic"]["id"] == stored_topic.id
        mock_llm.simple_json.assert_not_called()

    def test_repeat_request_is_cached(self, client, mock_llm, concepts_reply):
        """Repeating a request is served from the cache."""
        mock_llm.simple_json.return_value = concepts_reply
        first = client.post("/api/concepts", json={"topic": "Binary Search"}).json()

        second = client.post("/api/concepts", json={"topic": "binary search"}).json()

        assert second["cached"] is True
        assert [c["id"] for c in second["concepts"]] == [c["id"] for c in first["concepts"]]
        mock_llm.simple_json.assert_called_once()

    def test_user_id_seeds_progress(self, client, services, stored_topic):
        """userId seeds a progress row."""
        client.post("/api/concepts", json={"topic": "recursion", "userId": "u1"})

        record = services.progress.get("u1", stored_topic.id)
        assert record is not None
        assert record.concepts_completed == 0

    def test_llm_failure_is_500(self, client, mock_llm):
        """LLM failure returns 500."""
        mock_llm.simple_json.side_effect = LLMConnectionError("down")

        response = client.post("/api/concepts", json={"topic": "Graphs"})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to generate concepts"}

    def test_malformed_reply_is_500(self, client, mock_llm):
        """Malformed LLM reply returns 500."""
        mock_llm.simple_json.return_value = {"concepts": []}

        response = client.post("/api/concepts", json={"topic": "Graphs"})

        assert response.status_code == 500

    def test_invalid_json_body_is_400(self, client):
        """Body that is not JSON returns 400."""
        response = client.post(
            "/api/concepts",
            content="not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert "error" in response.json()
