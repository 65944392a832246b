"""Repository for per-(user, topic) progress counters.

Counters are only ever incremented. Writes go through a single
``INSERT ... ON CONFLICT DO UPDATE`` statement so the arithmetic happens in
the store and concurrent posts for the same pair cannot lose an increment.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta
from typing import Any

import structlog

from skillforge.db.database import Database, new_id

logger = structlog.get_logger(__name__)


@dataclass
class ProgressDelta:
    """Increments to fold into a progress row."""

    concepts_completed: int = 0
    problems_solved: int = 0
    problems_correct: int = 0
    xp_earned: int = 0


@dataclass
class ProgressRecord:
    """Progress record from database."""

    id: str
    user_id: str
    topic_id: str
    concepts_completed: int
    problems_solved: int
    problems_correct: int
    xp_earned: int
    streak_days: int
    last_activity: str | None
    created_at: str
    topic: dict[str, Any] | None = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        result = asdict(self)
        if self.topic is None:
            result.pop("topic")
        return result


# streak_days: same UTC day keeps the streak, the next day extends it,
# anything older (or no previous activity) restarts it at 1.
_UPSERT_SQL = """
INSERT INTO user_progress (
    id, user_id, topic_id,
    concepts_completed, problems_solved, problems_correct, xp_earned,
    streak_days, last_activity, created_at
) VALUES (
    :id, :user_id, :topic_id,
    :concepts_completed, :problems_solved, :problems_correct, :xp_earned,
    1, :stamp, :stamp
)
ON CONFLICT(user_id, topic_id) DO UPDATE SET
    concepts_completed = concepts_completed + excluded.concepts_completed,
    problems_solved = problems_solved + excluded.problems_solved,
    problems_correct = problems_correct + excluded.problems_correct,
    xp_earned = xp_earned + excluded.xp_earned,
    streak_days = CASE
        WHEN last_activity IS NULL THEN 1
        WHEN substr(last_activity, 1, 10) = :today THEN max(streak_days, 1)
        WHEN substr(last_activity, 1, 10) = :yesterday THEN streak_days + 1
        ELSE 1
    END,
    last_activity = excluded.last_activity
"""


class ProgressRepository:
    """Read and increment user progress rows."""

    def __init__(self, db: Database):
        self.db = db

    def get(self, user_id: str, topic_id: str) -> ProgressRecord | None:
        """Get the progress row of one (user, topic) pair."""
        with self.db.connect() as conn:
            row = conn.execute(
                "SELECT * FROM user_progress WHERE user_id = ? AND topic_id = ?",
                (user_id, topic_id),
            ).fetchone()

        if row is None:
            return None

        return _row_to_record(row)

    def increment(
        self, user_id: str, topic_id: str, delta: ProgressDelta, now: datetime
    ) -> ProgressRecord:
        """Add ``delta`` to the (user, topic) row, creating it if absent.

        Args:
            user_id: User identifier
            topic_id: Topic identifier (must exist)
            delta: Non-negative increments
            now: Activity timestamp (timezone-aware, UTC)

        Raises:
            sqlite3.IntegrityError: If topic_id does not exist
        """
        stamp = now.isoformat()
        params = {
            "id": new_id(),
            "user_id": user_id,
            "topic_id": topic_id,
            "concepts_completed": delta.concepts_completed,
            "problems_solved": delta.problems_solved,
            "problems_correct": delta.problems_correct,
            "xp_earned": delta.xp_earned,
            "stamp": stamp,
            "today": now.date().isoformat(),
            "yesterday": (now.date() - timedelta(days=1)).isoformat(),
        }

        with self.db.connect() as conn:
            conn.execute(_UPSERT_SQL, params)
            row = conn.execute(
                "SELECT * FROM user_progress WHERE user_id = ? AND topic_id = ?",
                (user_id, topic_id),
            ).fetchone()

        logger.debug(
            "progress.incremented",
            user_id=user_id,
            topic_id=topic_id,
            xp_delta=delta.xp_earned,
        )

        return _row_to_record(row)

    def seed(self, user_id: str, topic_id: str) -> None:
        """Create a zeroed row for the pair unless one already exists."""
        with self.db.connect() as conn:
            conn.execute(
                """
                INSERT INTO user_progress (id, user_id, topic_id)
                VALUES (?, ?, ?)
                ON CONFLICT(user_id, topic_id) DO NOTHING
                """,
                (new_id(), user_id, topic_id),
            )

    def list_for_user(self, user_id: str) -> list[ProgressRecord]:
        """Get all progress rows of a user with their topic embedded."""
        with self.db.connect() as conn:
            rows = conn.execute(
                """
                SELECT p.*,
                       t.name AS topic_name,
                       t.category AS topic_category,
                       t.description AS topic_description,
                       t.created_at AS topic_created_at
                FROM user_progress p
                LEFT JOIN topics t ON t.id = p.topic_id
                WHERE p.user_id = ?
                ORDER BY p.last_activity DESC, p.created_at DESC
                """,
                (user_id,),
            ).fetchall()

        records = []
        for row in rows:
            record = _row_to_record(row)
            if row["topic_name"] is not None:
                record.topic = {
                    "id": record.topic_id,
                    "name": row["topic_name"],
                    "category": row["topic_category"],
                    "description": row["topic_description"],
                    "created_at": row["topic_created_at"],
                }
            records.append(record)
        return records


def _row_to_record(row) -> ProgressRecord:
    """Convert database row to ProgressRecord."""
    return ProgressRecord(
        id=row["id"],
        user_id=row["user_id"],
        topic_id=row["topic_id"],
        concepts_completed=row["concepts_completed"],
        problems_solved=row["problems_solved"],
        problems_correct=row["problems_correct"],
        xp_earned=row["xp_earned"],
        streak_days=row["streak_days"],
        last_activity=row["last_activity"],
        created_at=row["created_at"],
    )
