"""SQLite database connection and schema management.

A ``Database`` is constructed once at process start and handed to the
repositories; each unit of work opens its own connection.
"""

from __future__ import annotations

import sqlite3
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator

import structlog

logger = structlog.get_logger(__name__)

# Default database location
DEFAULT_DB_PATH = Path("db/skillforge.db")


class Database:
    """Connection factory bound to one SQLite file."""

    def __init__(self, db_path: Path | None = None):
        self.path = Path(db_path or DEFAULT_DB_PATH)

    def init_schema(self) -> None:
        """Create the database file and all tables if they don't exist."""
        with self.connect() as conn:
            _create_schema(conn)

        logger.info("database.initialized", path=str(self.path))

    @contextmanager
    def connect(self) -> Generator[sqlite3.Connection, None, None]:
        """Get database connection as context manager.

        Commits on success, rolls back on any exception.

        Yields:
            SQLite connection with row factory set to sqlite3.Row

        Example:
            with db.connect() as conn:
                rows = conn.execute("SELECT * FROM topics").fetchall()
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        conn.create_function("casefold", 1, _casefold, deterministic=True)

        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()


def _create_schema(conn: sqlite3.Connection) -> None:
    """Create database schema.

    Uses IF NOT EXISTS for idempotency.
    """
    conn.executescript(
        """
        -- topics: one row per unique (case-insensitive) name
        CREATE TABLE IF NOT EXISTS topics (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL UNIQUE COLLATE NOCASE,
            category TEXT NOT NULL DEFAULT 'Other' CHECK(category IN (
                'Computer Science', 'Mathematics', 'AI/ML',
                'Software Engineering', 'Data Science', 'Other'
            )),
            description TEXT NOT NULL DEFAULT '',
            created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
        );

        CREATE TABLE IF NOT EXISTS concepts (
            id TEXT PRIMARY KEY,
            topic_id TEXT NOT NULL REFERENCES topics(id) ON DELETE CASCADE,
            title TEXT NOT NULL,
            content TEXT NOT NULL,
            difficulty TEXT NOT NULL CHECK(difficulty IN ('beginner', 'intermediate', 'advanced')),
            order_index INTEGER NOT NULL DEFAULT 0,
            created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
        );

        -- options is a JSON array of exactly 4 strings
        CREATE TABLE IF NOT EXISTS problems (
            id TEXT PRIMARY KEY,
            topic_id TEXT NOT NULL REFERENCES topics(id) ON DELETE CASCADE,
            question TEXT NOT NULL,
            options TEXT NOT NULL,
            correct_answer INTEGER NOT NULL CHECK(correct_answer BETWEEN 0 AND 3),
            hint TEXT NOT NULL DEFAULT '',
            explanation TEXT NOT NULL DEFAULT '',
            difficulty TEXT NOT NULL CHECK(difficulty IN ('easy', 'medium', 'hard', 'expert')),
            created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
        );

        CREATE TABLE IF NOT EXISTS user_progress (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            topic_id TEXT NOT NULL REFERENCES topics(id) ON DELETE CASCADE,
            concepts_completed INTEGER NOT NULL DEFAULT 0,
            problems_solved INTEGER NOT NULL DEFAULT 0,
            problems_correct INTEGER NOT NULL DEFAULT 0,
            xp_earned INTEGER NOT NULL DEFAULT 0,
            streak_days INTEGER NOT NULL DEFAULT 0,
            last_activity TEXT,
            created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
            UNIQUE(user_id, topic_id)
        );

        -- learning_goals / preferred_topics are JSON arrays
        CREATE TABLE IF NOT EXISTS profiles (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL UNIQUE,
            display_name TEXT,
            email TEXT,
            avatar_url TEXT,
            bio TEXT,
            learning_goals TEXT NOT NULL DEFAULT '[]',
            preferred_topics TEXT NOT NULL DEFAULT '[]',
            experience_level TEXT NOT NULL DEFAULT 'beginner' CHECK(experience_level IN (
                'beginner', 'intermediate', 'advanced', 'expert'
            )),
            daily_goal_minutes INTEGER NOT NULL DEFAULT 30,
            notifications_enabled INTEGER NOT NULL DEFAULT 1,
            created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
            updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
        );

        CREATE INDEX IF NOT EXISTS idx_concepts_topic ON concepts(topic_id, order_index);
        CREATE INDEX IF NOT EXISTS idx_problems_topic ON problems(topic_id, difficulty);
        CREATE INDEX IF NOT EXISTS idx_progress_user ON user_progress(user_id);
        """
    )


def _casefold(value: str | None) -> str | None:
    """Unicode-aware case folding; SQLite's own lower() and LIKE fold ASCII only."""
    return value.casefold() if value is not None else None


def new_id() -> str:
    """Generate a primary key for a new row."""
    return str(uuid.uuid4())


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 text, the format stored in timestamp columns."""
    return datetime.now(timezone.utc).isoformat()
