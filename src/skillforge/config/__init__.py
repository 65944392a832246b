"""Configuration package for SkillForge."""

from skillforge.config.app_config import (
    AppConfig,
    AuthConfig,
    DatabaseConfig,
    clear_config_cache,
    get_config_path,
    load_app_config,
)

__all__ = [
    "AppConfig",
    "AuthConfig",
    "DatabaseConfig",
    "clear_config_cache",
    "get_config_path",
    "load_app_config",
]
