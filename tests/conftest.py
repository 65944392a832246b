"""Shared fixtures: isolated database, mocked LLM, fake auth provider."""

from typing import Any
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from skillforge.auth.provider import AuthRejectedError, AuthSession, AuthUser
from skillforge.config.app_config import AppConfig, DatabaseConfig, clear_config_cache
from skillforge.db.content_repository import ContentRepository, NewConcept
from skillforge.db.database import Database
from skillforge.db.profiles_repository import ProfilesRepository
from skillforge.db.progress_repository import ProgressRepository
from skillforge.web.api import create_app
from skillforge.web.services import AppServices


class FakeAuthProvider:
    """In-memory stand-in for the Supabase provider."""

    def __init__(self):
        self.users: dict[str, tuple[AuthUser, str]] = {}
        self.codes: dict[str, str] = {}
        self.tokens: dict[str, str] = {}

    def add_user(self, email: str, password: str, display_name: str | None = None) -> AuthUser:
        user = AuthUser(id=f"user-{len(self.users) + 1}", email=email, display_name=display_name)
        self.users[email] = (user, password)
        self.tokens[f"token-{user.id}"] = email
        return user

    def exchange_code(self, code: str) -> AuthSession:
        if code not in self.codes:
            raise AuthRejectedError("Invalid authorization code")
        user, _ = self.users[self.codes[code]]
        return AuthSession(access_token=f"token-{user.id}", user=user)

    def sign_in(self, email: str, password: str) -> AuthSession:
        if email not in self.users or self.users[email][1] != password:
            raise AuthRejectedError("Invalid login credentials")
        user, _ = self.users[email]
        return AuthSession(access_token=f"token-{user.id}", user=user)

    def get_user(self, access_token: str) -> AuthUser | None:
        email = self.tokens.get(access_token)
        return self.users[email][0] if email else None

    def create_user(self, email: str, password: str, display_name: str | None = None) -> AuthUser:
        if email in self.users:
            raise AuthRejectedError("A user with this email address has already been registered")
        return self.add_user(email, password, display_name)


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path, monkeypatch):
    """Never read a developer's config or environment."""
    monkeypatch.setenv("SKILLFORGE_CONFIG", str(tmp_path / "missing.yaml"))
    monkeypatch.delenv("SKILLFORGE_ENV", raising=False)
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def database(tmp_path) -> Database:
    db = Database(tmp_path / "test.db")
    db.init_schema()
    return db


@pytest.fixture
def content_repo(database) -> ContentRepository:
    return ContentRepository(database)


@pytest.fixture
def progress_repo(database) -> ProgressRepository:
    return ProgressRepository(database)


@pytest.fixture
def profiles_repo(database) -> ProfilesRepository:
    return ProfilesRepository(database)


@pytest.fixture
def mock_llm() -> MagicMock:
    """LLM client double; tests set ``simple_json.return_value``."""
    llm = MagicMock()
    llm.config.provider = "openai"
    llm.config.model = "gpt-4o-mini"
    return llm


@pytest.fixture
def fake_auth() -> FakeAuthProvider:
    return FakeAuthProvider()


@pytest.fixture
def app_config(tmp_path) -> AppConfig:
    return AppConfig(database=DatabaseConfig(path=tmp_path / "test.db"))


@pytest.fixture
def services(app_config, database, mock_llm, fake_auth) -> AppServices:
    return AppServices(config=app_config, database=database, llm=mock_llm, auth=fake_auth)


@pytest.fixture
def client(services) -> TestClient:
    return TestClient(create_app(services))


@pytest.fixture
def concepts_reply() -> dict[str, Any]:
    """Well-formed LLM reply for a topic module."""
    return {
        "topicName": "Binary Search",
        "category": "Computer Science",
        "description": "Finding items in sorted collections in logarithmic time.",
        "concepts": [
            {
                "title": f"Concept {i}",
                "content": f"Explanation of part {i} with an example.",
                "difficulty": ["beginner", "beginner", "intermediate", "intermediate", "advanced"][i],
                "order_index": i,
            }
            for i in range(5)
        ],
    }


@pytest.fixture
def problems_reply() -> dict[str, Any]:
    """Well-formed LLM reply with five problems."""
    return {
        "problems": [
            {
                "question": f"Question {i}?",
                "options": ["A", "B", "C", "D"],
                "correct_answer": i % 4,
                "hint": "Think about halving.",
                "explanation": "Because the range halves each step.",
                "difficulty": "medium",
            }
            for i in range(5)
        ]
    }


@pytest.fixture
def reflection_reply() -> dict[str, Any]:
    return {
        "summary": "You worked through binary search.",
        "strengths": ["Solid on the basics"],
        "improvements": ["Edge cases"],
        "nextSteps": ["Try interpolation search"],
        "encouragement": "Keep going!",
        "xpEarned": 95,
        "badges": ["Quick Learner"],
    }


@pytest.fixture
def stored_topic(content_repo):
    """A topic with two concepts already in the store."""
    written = content_repo.create_topic_with_concepts(
        name="Recursion",
        category="Computer Science",
        description="Functions calling themselves.",
        concepts=[
            NewConcept(title="Base case", content="Stops recursion.", difficulty="beginner", order_index=0),
            NewConcept(title="Recursive step", content="Shrinks the input.", difficulty="beginner", order_index=1),
        ],
    )
    return written.topic
