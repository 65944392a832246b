"""Progress tracking: additive counter updates and dashboard statistics."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable

import structlog

from skillforge.db.content_repository import ContentRepository
from skillforge.db.progress_repository import (
    ProgressDelta,
    ProgressRecord,
    ProgressRepository,
)

logger = structlog.get_logger(__name__)

ANONYMOUS_USER = "anonymous"

# XP awarded by the learning screens
XP_PER_CONCEPT = 10
XP_PER_CORRECT_ANSWER = 20
XP_PER_LEVEL = 100

# Session bonus used when estimating reflection XP
HIGH_ACCURACY_THRESHOLD = 80
HIGH_ACCURACY_BONUS = 25


class ProgressValidationError(Exception):
    """Invalid progress update."""

    pass


@dataclass
class ProgressStats:
    """Summary of all progress rows of a user."""

    total_xp: int = 0
    total_problems: int = 0
    total_correct: int = 0
    accuracy: int = 0
    concepts_learned: int = 0
    streak: int = 0
    topics_studied: int = 0

    @property
    def level(self) -> int:
        return self.total_xp // XP_PER_LEVEL + 1

    @property
    def level_xp(self) -> int:
        """XP collected towards the next level."""
        return self.total_xp % XP_PER_LEVEL


@dataclass
class Achievement:
    """A dashboard badge and whether the stats unlock it."""

    name: str
    description: str
    unlocked: bool

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "description": self.description, "unlocked": self.unlocked}


@dataclass
class ProgressOverview:
    """Everything the dashboard shows for one user."""

    progress: list[ProgressRecord] = field(default_factory=list)
    stats: ProgressStats = field(default_factory=ProgressStats)
    achievements: list[Achievement] = field(default_factory=list)


def accuracy_percent(correct: int, total: int) -> int:
    """Whole-percent accuracy, 0 when nothing was attempted.

    Halves round up (7/8 -> 88), matching the dashboard's Math.round.
    """
    if total <= 0:
        return 0
    return (200 * correct + total) // (2 * total)


def compute_stats(rows: list[ProgressRecord]) -> ProgressStats:
    """Fold a user's per-topic progress rows into summary statistics."""
    total_problems = sum(r.problems_solved or 0 for r in rows)
    total_correct = sum(r.problems_correct or 0 for r in rows)

    return ProgressStats(
        total_xp=sum(r.xp_earned or 0 for r in rows),
        total_problems=total_problems,
        total_correct=total_correct,
        accuracy=accuracy_percent(total_correct, total_problems),
        concepts_learned=sum(r.concepts_completed or 0 for r in rows),
        streak=max((r.streak_days or 0 for r in rows), default=0),
        topics_studied=len(rows),
    )


def compute_achievements(stats: ProgressStats) -> list[Achievement]:
    """Evaluate the fixed badge set against the stats."""
    return [
        Achievement("First Steps", "Complete your first topic", stats.topics_studied > 0),
        Achievement("Problem Solver", "Solve 10 problems", stats.total_problems >= 10),
        Achievement("Knowledge Seeker", "Learn 5 concepts", stats.concepts_learned >= 5),
        Achievement("Sharp Mind", "80%+ accuracy", stats.accuracy >= 80),
        Achievement("XP Hunter", "Earn 100 XP", stats.total_xp >= 100),
        Achievement("Dedicated Learner", "3 day streak", stats.streak >= 3),
    ]


def estimate_session_xp(
    concepts_completed: int, problems_solved: int, problems_correct: int
) -> int:
    """XP a learning session is worth: per concept, per correct answer, plus bonus."""
    xp = concepts_completed * XP_PER_CONCEPT + problems_correct * XP_PER_CORRECT_ANSWER
    if (
        problems_solved > 0
        and accuracy_percent(problems_correct, problems_solved) >= HIGH_ACCURACY_THRESHOLD
    ):
        xp += HIGH_ACCURACY_BONUS
    return xp


def get_overview(progress: ProgressRepository, user_id: str | None) -> ProgressOverview:
    """Load a user's progress rows and derive stats and achievements."""
    rows = progress.list_for_user(user_id or ANONYMOUS_USER)
    stats = compute_stats(rows)
    return ProgressOverview(
        progress=rows,
        stats=stats,
        achievements=compute_achievements(stats),
    )


def record_progress(
    progress: ProgressRepository,
    content: ContentRepository,
    topic_id: str,
    delta: ProgressDelta,
    user_id: str | None = None,
    clock: Callable[[], datetime] | None = None,
) -> ProgressRecord:
    """Fold ``delta`` into the (user, topic) row.

    Raises:
        ProgressValidationError: On negative deltas, more correct than solved,
            or an unknown topic
    """
    for name, value in vars(delta).items():
        if value < 0:
            raise ProgressValidationError(f"{name} must not be negative")
    if delta.problems_correct > delta.problems_solved:
        raise ProgressValidationError("problemsCorrect cannot exceed problemsSolved")

    if content.get_topic(topic_id) is None:
        raise ProgressValidationError(f"Unknown topic: {topic_id}")

    now = (clock or _utc_now)()
    user = user_id or ANONYMOUS_USER

    try:
        record = progress.increment(user, topic_id, delta, now)
    except sqlite3.IntegrityError as e:
        # Topic deleted between the check and the write
        raise ProgressValidationError(f"Unknown topic: {topic_id}") from e

    logger.info(
        "progress.recorded",
        user_id=user,
        topic_id=topic_id,
        xp_earned=record.xp_earned,
        streak_days=record.streak_days,
    )
    return record


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)
