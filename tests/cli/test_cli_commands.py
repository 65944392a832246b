"""Tests for the skillforge CLI."""

from datetime import datetime, timezone
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from skillforge.cli.commands import app
from skillforge.db.progress_repository import ProgressDelta
from skillforge.llm.client import LLMConnectionError

runner = CliRunner()


@pytest.fixture
def cli_services(services):
    with patch("skillforge.cli.commands._load_services", return_value=services):
        yield services


class TestInitDb:
    """Tests for the init-db command."""

    def test_creates_database_file(self, tmp_path, monkeypatch):
        """Creates the SQLite file under the default path."""
        monkeypatch.chdir(tmp_path)

        result = runner.invoke(app, ["init-db"])

        assert result.exit_code == 0
        assert "Schema ready" in result.stdout
        assert (tmp_path / "db" / "skillforge.db").exists()


class TestConceptsCommand:
    """Tests for the concepts command."""

    def test_generates_and_lists_concepts(self, cli_services, mock_llm, concepts_reply):
        """Prints the generated concepts."""
        mock_llm.simple_json.return_value = concepts_reply

        result = runner.invoke(app, ["concepts", "Binary Search"])

        assert result.exit_code == 0
        assert "generated" in result.stdout
        assert "Concept 0" in result.stdout

    def test_cached_topic(self, cli_services, mock_llm, stored_topic):
        """A stored topic is shown without calling the LLM and seeds progress."""
        result = runner.invoke(app, ["concepts", "recursion", "--user", "u1"])

        assert result.exit_code == 0
        assert "cached" in result.stdout
        mock_llm.simple_json.assert_not_called()
        assert cli_services.progress.get("u1", stored_topic.id) is not None

    def test_llm_down_exits_1(self, cli_services, mock_llm):
        """Exits 1 with a connection hint when the LLM is down."""
        mock_llm.simple_json.side_effect = LLMConnectionError("refused")

        result = runner.invoke(app, ["concepts", "Graphs"])

        assert result.exit_code == 1
        assert "Could not connect" in result.stdout


class TestProblemsCommand:
    """Tests for the problems command."""

    def test_preview_problems(self, cli_services, mock_llm, problems_reply):
        """Prints preview problems with their options."""
        mock_llm.simple_json.return_value = problems_reply

        result = runner.invoke(app, ["problems", "Sorting", "--count", "3"])

        assert result.exit_code == 0
        assert "3 problems" in result.stdout
        assert "Question 0?" in result.stdout

    def test_invalid_difficulty_exits_1(self, cli_services, mock_llm):
        """Rejects an unknown difficulty before calling the LLM."""
        result = runner.invoke(app, ["problems", "Sorting", "--difficulty", "legendary"])

        assert result.exit_code == 1
        mock_llm.simple_json.assert_not_called()


class TestStatsCommand:
    """Tests for the stats command."""

    def test_shows_level_and_achievements(self, cli_services, stored_topic):
        """Shows level, topics and unlocked achievements."""
        cli_services.progress.increment(
            "u1",
            stored_topic.id,
            ProgressDelta(problems_solved=10, problems_correct=9, xp_earned=120),
            now=datetime.now(timezone.utc),
        )

        result = runner.invoke(app, ["stats", "--user", "u1"])

        assert result.exit_code == 0
        assert "Recursion" in result.stdout
        assert "Achievements" in result.stdout
        assert "Sharp Mind" in result.stdout


class TestCheckLlmCommand:
    """Tests for the check-llm command."""

    def test_reachable_server(self):
        """Exits 0 when the server lists its models."""
        with patch("skillforge.llm.client.OpenAI"):
            result = runner.invoke(app, ["check-llm"])

        assert result.exit_code == 0
        assert "LLM server reachable" in result.stdout

    def test_unreachable_server_exits_1(self):
        """Exits 1 when listing models fails."""
        with patch("skillforge.llm.client.OpenAI") as mock_openai:
            mock_openai.return_value.models.list.side_effect = ConnectionError("refused")
            result = runner.invoke(app, ["check-llm"])

        assert result.exit_code == 1
        assert "Could not connect" in result.stdout
