"""Repository functions for the profiles table.

One profile per user identifier.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from typing import Any

import structlog

from skillforge.db.database import Database, new_id, utc_now_iso

logger = structlog.get_logger(__name__)

# Columns a caller may set; everything else is managed here.
PROFILE_FIELDS = (
    "display_name",
    "email",
    "avatar_url",
    "bio",
    "learning_goals",
    "preferred_topics",
    "experience_level",
    "daily_goal_minutes",
    "notifications_enabled",
)

_JSON_FIELDS = ("learning_goals", "preferred_topics")


@dataclass
class ProfileRecord:
    """Profile record from database."""

    id: str
    user_id: str
    display_name: str | None
    email: str | None
    avatar_url: str | None
    bio: str | None
    learning_goals: list[str]
    preferred_topics: list[str]
    experience_level: str
    daily_goal_minutes: int
    notifications_enabled: bool
    created_at: str
    updated_at: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class ProfilesRepository:
    """CRUD operations for user profiles."""

    def __init__(self, db: Database):
        self.db = db

    def get_by_user(self, user_id: str) -> ProfileRecord | None:
        """Get the profile of a user, or None if there is none yet."""
        with self.db.connect() as conn:
            row = conn.execute(
                "SELECT * FROM profiles WHERE user_id = ?", (user_id,)
            ).fetchone()

        if row is None:
            return None

        return _row_to_record(row)

    def insert(self, user_id: str, fields: dict[str, Any]) -> ProfileRecord:
        """Insert a new profile.

        Args:
            user_id: Owner of the profile
            fields: Values for PROFILE_FIELDS; omitted ones take column defaults

        Raises:
            sqlite3.IntegrityError: If the user already has a profile
        """
        values = _to_columns(fields)
        now = utc_now_iso()
        columns = ["id", "user_id", *values.keys(), "created_at", "updated_at"]
        params = [new_id(), user_id, *values.values(), now, now]

        with self.db.connect() as conn:
            conn.execute(
                f"INSERT INTO profiles ({', '.join(columns)}) "
                f"VALUES ({', '.join('?' for _ in columns)})",
                params,
            )
            row = conn.execute(
                "SELECT * FROM profiles WHERE user_id = ?", (user_id,)
            ).fetchone()

        logger.debug("profiles.inserted", user_id=user_id)

        return _row_to_record(row)

    def update(self, user_id: str, fields: dict[str, Any]) -> ProfileRecord | None:
        """Update only the given fields of a user's profile.

        Returns:
            Updated record, or None if the user has no profile
        """
        values = _to_columns(fields)
        values["updated_at"] = utc_now_iso()
        assignments = ", ".join(f"{column} = ?" for column in values)

        with self.db.connect() as conn:
            cursor = conn.execute(
                f"UPDATE profiles SET {assignments} WHERE user_id = ?",
                [*values.values(), user_id],
            )
            if cursor.rowcount == 0:
                return None
            row = conn.execute(
                "SELECT * FROM profiles WHERE user_id = ?", (user_id,)
            ).fetchone()

        logger.debug("profiles.updated", user_id=user_id, fields=sorted(fields))

        return _row_to_record(row)


def _to_columns(fields: dict[str, Any]) -> dict[str, Any]:
    """Keep known columns and encode them for storage."""
    unknown = set(fields) - set(PROFILE_FIELDS)
    if unknown:
        raise ValueError(f"Unknown profile fields: {sorted(unknown)}")

    values: dict[str, Any] = {}
    for name in PROFILE_FIELDS:
        if name not in fields:
            continue
        value = fields[name]
        if name in _JSON_FIELDS:
            value = json.dumps(list(value or []))
        elif name == "notifications_enabled" and value is not None:
            value = int(bool(value))
        values[name] = value
    return values


def _row_to_record(row) -> ProfileRecord:
    """Convert database row to ProfileRecord."""
    return ProfileRecord(
        id=row["id"],
        user_id=row["user_id"],
        display_name=row["display_name"],
        email=row["email"],
        avatar_url=row["avatar_url"],
        bio=row["bio"],
        learning_goals=json.loads(row["learning_goals"]) if row["learning_goals"] else [],
        preferred_topics=json.loads(row["preferred_topics"]) if row["preferred_topics"] else [],
        experience_level=row["experience_level"],
        daily_goal_minutes=row["daily_goal_minutes"],
        notifications_enabled=bool(row["notifications_enabled"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )
