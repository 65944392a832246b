"""Application configuration loader.

Loads centralized configuration from config/skillforge.yaml (or the file
named by SKILLFORGE_CONFIG) with built-in defaults when the file is absent.

Usage:
    from skillforge.config.app_config import load_app_config

    config = load_app_config()
    db_path = config.database.path
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger(__name__)

# Config file paths (relative to project root)
CONFIG_FILE = Path("config/skillforge.yaml")
CONFIG_ENV_VAR = "SKILLFORGE_CONFIG"
ENVIRONMENT_ENV_VAR = "SKILLFORGE_ENV"

SESSION_MAX_AGE_SECONDS = 60 * 60 * 24 * 7


@dataclass
class DatabaseConfig:
    """Configuration for the relational store."""

    path: Path = Path("db/skillforge.db")


@dataclass
class AuthConfig:
    """Configuration for the managed auth provider and session cookie."""

    url_env: str = "SUPABASE_URL"
    anon_key_env: str = "SUPABASE_ANON_KEY"
    service_key_env: str = "SUPABASE_SERVICE_ROLE_KEY"
    cookie_name: str = "auth-token"
    cookie_max_age: int = SESSION_MAX_AGE_SECONDS

    def get_url(self) -> str | None:
        """Get provider URL from environment variable."""
        return os.environ.get(self.url_env)

    def get_anon_key(self) -> str | None:
        """Get public (anon) key from environment variable."""
        return os.environ.get(self.anon_key_env)

    def get_service_key(self) -> str | None:
        """Get service-role key from environment variable."""
        return os.environ.get(self.service_key_env)


@dataclass
class AppConfig:
    """Application-wide configuration."""

    environment: str = "development"
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    config_path: Path | None = None

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


# Module-level cache
_cached_config: AppConfig | None = None


def get_config_path() -> Path:
    """Resolve the YAML config path, honoring SKILLFORGE_CONFIG."""
    override = os.environ.get(CONFIG_ENV_VAR)
    return Path(override) if override else CONFIG_FILE


def _get_defaults() -> dict[str, Any]:
    """Get default configuration values."""
    return {
        "environment": "development",
        "database": {
            "path": "db/skillforge.db",
        },
        "auth": {
            "url_env": "SUPABASE_URL",
            "anon_key_env": "SUPABASE_ANON_KEY",
            "service_key_env": "SUPABASE_SERVICE_ROLE_KEY",
            "cookie_name": "auth-token",
            "cookie_max_age": SESSION_MAX_AGE_SECONDS,
        },
    }


def _parse_config(data: dict[str, Any], config_path: Path | None = None) -> AppConfig:
    """Parse configuration dictionary into AppConfig object."""
    defaults = _get_defaults()

    db_data = {**defaults["database"], **(data.get("database") or {})}
    database = DatabaseConfig(path=Path(db_data["path"]))

    auth_data = {**defaults["auth"], **(data.get("auth") or {})}
    auth = AuthConfig(
        url_env=auth_data["url_env"],
        anon_key_env=auth_data["anon_key_env"],
        service_key_env=auth_data["service_key_env"],
        cookie_name=auth_data["cookie_name"],
        cookie_max_age=int(auth_data["cookie_max_age"]),
    )

    environment = os.environ.get(ENVIRONMENT_ENV_VAR) or data.get(
        "environment", defaults["environment"]
    )

    return AppConfig(
        environment=environment,
        database=database,
        auth=auth,
        config_path=config_path,
    )


def load_app_config(force_reload: bool = False) -> AppConfig:
    """Load application config.

    Args:
        force_reload: If True, ignore cached config and reload from file.

    Returns:
        AppConfig object with all settings.
    """
    global _cached_config

    if _cached_config is not None and not force_reload:
        return _cached_config

    config_path = get_config_path()

    if config_path.exists():
        logger.debug("loading_app_config", source=str(config_path))
        data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
        _cached_config = _parse_config(data, config_path)
    else:
        logger.info("using_default_config", looked_at=str(config_path))
        _cached_config = _parse_config(_get_defaults())

    return _cached_config


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when config is modified at runtime.
    """
    global _cached_config
    _cached_config = None
