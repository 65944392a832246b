"""Profile management: create, partial update and create-if-absent."""

from __future__ import annotations

import sqlite3
from typing import Any

import structlog

from skillforge.db.profiles_repository import ProfileRecord, ProfilesRepository

logger = structlog.get_logger(__name__)

CREATE_DEFAULTS: dict[str, Any] = {
    "learning_goals": [],
    "preferred_topics": [],
    "experience_level": "beginner",
    "daily_goal_minutes": 30,
    "notifications_enabled": True,
}


class ProfileExistsError(Exception):
    """Raised when creating a profile for a user that already has one."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"Profile already exists for user '{user_id}'")


def _unique(items: list[str] | None) -> list[str]:
    """Drop duplicates, keeping first occurrences."""
    return list(dict.fromkeys(items or []))


def _normalize(fields: dict[str, Any]) -> dict[str, Any]:
    # Null cannot clear a column that has a default; treat it as absent
    result = {
        name: value
        for name, value in fields.items()
        if not (value is None and name in CREATE_DEFAULTS)
    }
    for name in ("learning_goals", "preferred_topics"):
        if name in result:
            result[name] = _unique(result[name])
    return result


def _with_defaults(fields: dict[str, Any]) -> dict[str, Any]:
    """Fill defaults for fields absent or null on creation."""
    result = dict(fields)
    for name, default in CREATE_DEFAULTS.items():
        if result.get(name) is None:
            result[name] = default
    return result


def get_profile(profiles: ProfilesRepository, user_id: str) -> ProfileRecord | None:
    """Get a user's profile, or None if they have not created one."""
    return profiles.get_by_user(user_id)


def create_profile(
    profiles: ProfilesRepository, user_id: str, fields: dict[str, Any]
) -> ProfileRecord:
    """Create a profile; an existing one is left untouched.

    Raises:
        ProfileExistsError: If the user already has a profile
    """
    if profiles.get_by_user(user_id) is not None:
        raise ProfileExistsError(user_id)

    try:
        record = profiles.insert(user_id, _with_defaults(_normalize(fields)))
    except sqlite3.IntegrityError as e:
        raise ProfileExistsError(user_id) from e

    logger.info("profile.created", user_id=user_id)
    return record


def upsert_profile(
    profiles: ProfilesRepository, user_id: str, fields: dict[str, Any]
) -> tuple[ProfileRecord, bool]:
    """Update the given fields, creating the profile first if absent.

    Returns:
        (profile, created) where created is True if a new row was inserted
    """
    fields = _normalize(fields)

    if profiles.get_by_user(user_id) is None:
        try:
            return create_profile(profiles, user_id, fields), True
        except ProfileExistsError:
            # Created concurrently; fall through to the update
            logger.debug("profile.created_concurrently", user_id=user_id)

    record = profiles.update(user_id, fields)
    if record is None:
        raise RuntimeError(f"Profile for user '{user_id}' vanished during update")

    logger.info("profile.updated", user_id=user_id, fields=sorted(fields))
    return record, False


def ensure_signup_profile(
    profiles: ProfilesRepository, user_id: str, email: str, display_name: str | None
) -> ProfileRecord:
    """Create or refresh the profile attached to a newly signed-up user."""
    fields = {
        "display_name": display_name or email.split("@")[0],
        "email": email,
    }
    record, _ = upsert_profile(profiles, user_id, fields)
    return record
