"""Service container shared by the route handlers.

Built once at process start (or handed to ``create_app`` by tests) and
stored on ``app.state.services``.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from fastapi import Request

from skillforge.auth.provider import SupabaseAuthProvider
from skillforge.config.app_config import AppConfig, get_config_path
from skillforge.db.content_repository import ContentRepository
from skillforge.db.database import Database
from skillforge.db.profiles_repository import ProfilesRepository
from skillforge.db.progress_repository import ProgressRepository
from skillforge.llm.client import LLMClient, LLMConfig


@dataclass
class AppServices:
    """Clients and repositories injected into every request."""

    config: AppConfig
    database: Database
    llm: LLMClient
    auth: SupabaseAuthProvider
    content: ContentRepository = field(init=False)
    progress: ProgressRepository = field(init=False)
    profiles: ProfilesRepository = field(init=False)

    def __post_init__(self):
        self.content = ContentRepository(self.database)
        self.progress = ProgressRepository(self.database)
        self.profiles = ProfilesRepository(self.database)

    @classmethod
    def from_config(cls, config: AppConfig) -> AppServices:
        """Construct the production clients described by ``config``."""
        llm_config = LLMConfig.from_yaml(config.config_path or get_config_path())
        return cls(
            config=config,
            database=Database(config.database.path),
            llm=LLMClient(llm_config),
            auth=SupabaseAuthProvider.from_config(config.auth),
        )


def get_services(request: Request) -> AppServices:
    """FastAPI dependency returning the app's service container."""
    return request.app.state.services
