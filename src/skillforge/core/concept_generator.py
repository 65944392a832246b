"""Concept generation module.

Responsibilities:
- Serve stored concepts when a topic was already generated (cache hit)
- Otherwise ask the LLM for a topic module of 5 concepts
- Validate the reply and persist topic + concepts together

Output structure (LLM JSON):
- topicName, category, description, concepts[{title, content, difficulty, order_index}]
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, get_args

import structlog

from skillforge.db.content_repository import (
    ConceptRecord,
    ContentRepository,
    NewConcept,
    TopicRecord,
)
from skillforge.db.progress_repository import ProgressRepository
from skillforge.llm.client import LLMClient

logger = structlog.get_logger(__name__)

# =============================================================================
# TYPES
# =============================================================================

TopicCategory = Literal[
    "Computer Science",
    "Mathematics",
    "AI/ML",
    "Software Engineering",
    "Data Science",
    "Other",
]
ConceptDifficulty = Literal["beginner", "intermediate", "advanced"]

CATEGORIES: tuple[str, ...] = get_args(TopicCategory)
CONCEPT_DIFFICULTIES: tuple[str, ...] = get_args(ConceptDifficulty)
CONCEPTS_PER_TOPIC = 5

# =============================================================================
# PROMPTS
# =============================================================================

SYSTEM_PROMPT_CONCEPTS = """You are an expert educator who writes structured learning modules.

Respond ONLY with a valid JSON object with this exact structure:
{
  "topicName": "the topic name",
  "category": "one of: Computer Science, Mathematics, AI/ML, Software Engineering, Data Science, Other",
  "description": "brief description of the topic",
  "concepts": [
    {
      "title": "concept title",
      "content": "detailed explanation (2-3 paragraphs with examples, use markdown formatting)",
      "difficulty": "beginner|intermediate|advanced",
      "order_index": 0
    }
  ]
}"""

USER_PROMPT_CONCEPTS = """Generate a comprehensive learning module for the topic: "{topic}".

Create exactly {count} concept sections that progressively teach this topic from basics to advanced.

Make the content engaging, practical, and include real-world examples. Use code examples where relevant (in markdown code blocks)."""


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class GeneratedTopic:
    """Topic module parsed from an LLM reply, not yet persisted."""

    name: str
    category: str
    description: str
    concepts: list[NewConcept]


@dataclass
class ConceptGenerationResult:
    """Result of a concepts request."""

    topic: TopicRecord
    concepts: list[ConceptRecord]
    cached: bool


class ConceptGenerationError(Exception):
    """Error during concept generation."""

    pass


# =============================================================================
# PROMPT / PARSER
# =============================================================================


def build_concepts_prompt(topic: str) -> str:
    """Build the user prompt for a topic module."""
    return USER_PROMPT_CONCEPTS.format(topic=topic, count=CONCEPTS_PER_TOPIC)


def parse_concepts_reply(data: dict[str, Any], requested_topic: str) -> GeneratedTopic:
    """Validate an LLM reply and convert it to a GeneratedTopic.

    ``order_index`` falls back to the array position when the reply omits it.
    Extra concepts beyond CONCEPTS_PER_TOPIC are dropped.

    Raises:
        ConceptGenerationError: If the reply does not match the schema
    """
    raw_concepts = data.get("concepts")
    if not isinstance(raw_concepts, list) or not raw_concepts:
        raise ConceptGenerationError("Reply contains no concepts")

    concepts = []
    for index, raw in enumerate(raw_concepts[:CONCEPTS_PER_TOPIC]):
        if not isinstance(raw, dict):
            raise ConceptGenerationError(f"Concept {index} is not an object")

        title = str(raw.get("title") or "").strip()
        content = str(raw.get("content") or "").strip()
        if not title or not content:
            raise ConceptGenerationError(f"Concept {index} is missing title or content")

        difficulty = str(raw.get("difficulty") or "").strip().lower()
        if difficulty not in CONCEPT_DIFFICULTIES:
            raise ConceptGenerationError(
                f"Concept {index} has invalid difficulty: {raw.get('difficulty')!r}"
            )

        order_index = raw.get("order_index")
        if not isinstance(order_index, int) or isinstance(order_index, bool):
            order_index = index

        concepts.append(
            NewConcept(
                title=title,
                content=content,
                difficulty=difficulty,
                order_index=order_index,
            )
        )

    name = str(data.get("topicName") or "").strip() or requested_topic.strip()
    category = data.get("category")
    if category not in CATEGORIES:
        category = "Other"

    return GeneratedTopic(
        name=name,
        category=category,
        description=str(data.get("description") or "").strip(),
        concepts=concepts,
    )


# =============================================================================
# GENERATION
# =============================================================================


def generate_concepts(
    topic: str,
    llm: LLMClient,
    content: ContentRepository,
    progress: ProgressRepository,
    user_id: str | None = None,
) -> ConceptGenerationResult:
    """Return the concepts of a topic, generating them on a cache miss.

    Args:
        topic: Requested topic (matched as a case-insensitive substring)
        llm: LLM client used on a cache miss
        content: Content repository
        progress: Progress repository (seeded when user_id is given)
        user_id: Optional user to start tracking progress for

    Raises:
        ConceptGenerationError: If the LLM reply is unusable
        LLMError: If the LLM call fails
    """
    existing_topic = content.find_topic_with_concepts(topic)
    if existing_topic is not None:
        concepts = content.get_concepts(existing_topic.id)
        logger.info(
            "concepts.cache_hit",
            topic=topic,
            topic_id=existing_topic.id,
            count=len(concepts),
        )
        if user_id:
            progress.seed(user_id, existing_topic.id)
        return ConceptGenerationResult(
            topic=existing_topic, concepts=concepts, cached=True
        )

    logger.info("concepts.cache_miss", topic=topic)

    data = llm.simple_json(SYSTEM_PROMPT_CONCEPTS, build_concepts_prompt(topic))
    generated = parse_concepts_reply(data, topic)

    written = content.create_topic_with_concepts(
        name=generated.name,
        category=generated.category,
        description=generated.description,
        concepts=generated.concepts,
    )

    if user_id:
        progress.seed(user_id, written.topic.id)

    logger.info(
        "concepts.generated",
        topic=topic,
        topic_id=written.topic.id,
        count=len(written.concepts),
        reused_topic=written.reused,
    )

    return ConceptGenerationResult(
        topic=written.topic,
        concepts=written.concepts,
        cached=written.reused,
    )
