"""Repository for generated learning content: topics, concepts and problems.

Rows in these tables are immutable once written.
"""

from __future__ import annotations

import json
import sqlite3
from dataclasses import asdict, dataclass
from typing import Any

import structlog

from skillforge.db.database import Database, new_id, utc_now_iso

logger = structlog.get_logger(__name__)


@dataclass
class TopicRecord:
    """Topic record from database."""

    id: str
    name: str
    category: str
    description: str
    created_at: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ConceptRecord:
    """Concept record from database."""

    id: str
    topic_id: str
    title: str
    content: str
    difficulty: str
    order_index: int
    created_at: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ProblemRecord:
    """Problem record from database."""

    id: str
    topic_id: str
    question: str
    options: list[str]
    correct_answer: int
    hint: str
    explanation: str
    difficulty: str
    created_at: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class NewConcept:
    """Concept fields to insert (no id yet)."""

    title: str
    content: str
    difficulty: str
    order_index: int


@dataclass
class NewProblem:
    """Problem fields to insert (no id yet)."""

    question: str
    options: list[str]
    correct_answer: int
    hint: str
    explanation: str
    difficulty: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class TopicWriteResult:
    """Outcome of writing a topic together with its concepts.

    ``reused`` is True when a topic with the same name already had concepts,
    in which case ``concepts`` are the stored ones and nothing was inserted.
    """

    topic: TopicRecord
    concepts: list[ConceptRecord]
    reused: bool = False


class ContentRepository:
    """CRUD operations for topics, concepts and problems."""

    def __init__(self, db: Database):
        self.db = db

    # ------------------------------------------------------------------
    # Topics
    # ------------------------------------------------------------------

    def get_topic(self, topic_id: str) -> TopicRecord | None:
        """Get topic by ID."""
        with self.db.connect() as conn:
            row = conn.execute(
                "SELECT * FROM topics WHERE id = ?", (topic_id,)
            ).fetchone()

        if row is None:
            return None

        return _row_to_topic(row)

    def find_topic_with_concepts(self, query: str) -> TopicRecord | None:
        """Find the topic whose concepts answer a request for ``query``.

        Matches topic names containing ``query`` under Unicode case folding
        ("álgebra" finds "Álgebra"). Only topics that already have concepts
        are considered; an exact name match wins over the earliest-created
        partial match.
        """
        folded = query.casefold()
        with self.db.connect() as conn:
            row = conn.execute(
                """
                SELECT t.* FROM topics t
                WHERE instr(casefold(t.name), ?) > 0
                  AND EXISTS (SELECT 1 FROM concepts c WHERE c.topic_id = t.id)
                ORDER BY (casefold(t.name) = ?) DESC, t.created_at, t.rowid
                LIMIT 1
                """,
                (folded, folded),
            ).fetchone()

        if row is None:
            return None

        return _row_to_topic(row)

    def create_topic_with_concepts(
        self,
        name: str,
        category: str,
        description: str,
        concepts: list[NewConcept],
    ) -> TopicWriteResult:
        """Insert a topic and its concepts in one transaction.

        If a topic with the same name already exists it is reused instead of
        duplicated. When that topic already has concepts, nothing is written
        and the stored concepts are returned.
        """
        created_at = utc_now_iso()

        with self.db.connect() as conn:
            conn.execute(
                """
                INSERT INTO topics (id, name, category, description, created_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT DO NOTHING
                """,
                (new_id(), name, category, description, created_at),
            )
            topic = _row_to_topic(
                conn.execute(
                    "SELECT * FROM topics WHERE name = ? COLLATE NOCASE", (name,)
                ).fetchone()
            )

            existing = _select_concepts(conn, topic.id)
            if existing:
                logger.info("topics.reused_existing", topic_id=topic.id, name=name)
                return TopicWriteResult(topic=topic, concepts=existing, reused=True)

            records = [
                ConceptRecord(
                    id=new_id(),
                    topic_id=topic.id,
                    title=c.title,
                    content=c.content,
                    difficulty=c.difficulty,
                    order_index=c.order_index,
                    created_at=created_at,
                )
                for c in concepts
            ]
            conn.executemany(
                """
                INSERT INTO concepts (
                    id, topic_id, title, content, difficulty, order_index, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        r.id,
                        r.topic_id,
                        r.title,
                        r.content,
                        r.difficulty,
                        r.order_index,
                        r.created_at,
                    )
                    for r in records
                ],
            )

        logger.debug("concepts.inserted", topic_id=topic.id, count=len(records))

        records.sort(key=lambda r: r.order_index)
        return TopicWriteResult(topic=topic, concepts=records)

    # ------------------------------------------------------------------
    # Concepts
    # ------------------------------------------------------------------

    def get_concepts(self, topic_id: str) -> list[ConceptRecord]:
        """Get all concepts of a topic in display order."""
        with self.db.connect() as conn:
            return _select_concepts(conn, topic_id)

    # ------------------------------------------------------------------
    # Problems
    # ------------------------------------------------------------------

    def list_problems(
        self, topic_id: str, difficulty: str, limit: int
    ) -> list[ProblemRecord]:
        """Get up to ``limit`` problems of a topic at one difficulty."""
        with self.db.connect() as conn:
            rows = conn.execute(
                """
                SELECT * FROM problems
                WHERE topic_id = ? AND difficulty = ?
                ORDER BY created_at, rowid
                LIMIT ?
                """,
                (topic_id, difficulty, limit),
            ).fetchall()

        return [_row_to_problem(row) for row in rows]

    def insert_problems(
        self, topic_id: str, problems: list[NewProblem]
    ) -> list[ProblemRecord]:
        """Batch-insert problems for an existing topic.

        Raises:
            sqlite3.IntegrityError: If topic_id does not exist
        """
        created_at = utc_now_iso()
        records = [
            ProblemRecord(
                id=new_id(),
                topic_id=topic_id,
                question=p.question,
                options=list(p.options),
                correct_answer=p.correct_answer,
                hint=p.hint,
                explanation=p.explanation,
                difficulty=p.difficulty,
                created_at=created_at,
            )
            for p in problems
        ]

        with self.db.connect() as conn:
            conn.executemany(
                """
                INSERT INTO problems (
                    id, topic_id, question, options, correct_answer,
                    hint, explanation, difficulty, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        r.id,
                        r.topic_id,
                        r.question,
                        json.dumps(r.options),
                        r.correct_answer,
                        r.hint,
                        r.explanation,
                        r.difficulty,
                        r.created_at,
                    )
                    for r in records
                ],
            )

        logger.debug("problems.inserted", topic_id=topic_id, count=len(records))

        return records


def _select_concepts(conn: sqlite3.Connection, topic_id: str) -> list[ConceptRecord]:
    rows = conn.execute(
        "SELECT * FROM concepts WHERE topic_id = ? ORDER BY order_index, rowid",
        (topic_id,),
    ).fetchall()
    return [_row_to_concept(row) for row in rows]


def _row_to_topic(row) -> TopicRecord:
    """Convert database row to TopicRecord."""
    return TopicRecord(
        id=row["id"],
        name=row["name"],
        category=row["category"],
        description=row["description"],
        created_at=row["created_at"],
    )


def _row_to_concept(row) -> ConceptRecord:
    """Convert database row to ConceptRecord."""
    return ConceptRecord(
        id=row["id"],
        topic_id=row["topic_id"],
        title=row["title"],
        content=row["content"],
        difficulty=row["difficulty"],
        order_index=row["order_index"],
        created_at=row["created_at"],
    )


def _row_to_problem(row) -> ProblemRecord:
    """Convert database row to ProblemRecord."""
    return ProblemRecord(
        id=row["id"],
        topic_id=row["topic_id"],
        question=row["question"],
        options=json.loads(row["options"]) if row["options"] else [],
        correct_answer=row["correct_answer"],
        hint=row["hint"],
        explanation=row["explanation"],
        difficulty=row["difficulty"],
        created_at=row["created_at"],
    )
