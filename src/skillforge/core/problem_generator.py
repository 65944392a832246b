"""Practice problem generation module.

Responsibilities:
- Serve stored problems for (topic_id, difficulty) when enough exist
- Otherwise ask the LLM for `count` multiple-choice problems
- Validate the reply (4 options, correct_answer index 0-3)
- Persist problems when a topic_id is given; preview mode otherwise
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, get_args

import structlog

from skillforge.db.content_repository import ContentRepository, NewProblem
from skillforge.llm.client import LLMClient

logger = structlog.get_logger(__name__)

# =============================================================================
# TYPES
# =============================================================================

ProblemDifficulty = Literal["easy", "medium", "hard", "expert"]

PROBLEM_DIFFICULTIES: tuple[str, ...] = get_args(ProblemDifficulty)
DEFAULT_DIFFICULTY: ProblemDifficulty = "medium"
DEFAULT_COUNT = 5
OPTIONS_PER_PROBLEM = 4

# =============================================================================
# PROMPTS
# =============================================================================

SYSTEM_PROMPT_PROBLEMS = """You are an expert educator creating multiple-choice practice problems.

Respond ONLY with a valid JSON object with this exact structure:
{
  "problems": [
    {
      "question": "the question text",
      "options": ["option A", "option B", "option C", "option D"],
      "correct_answer": 0,
      "hint": "a helpful hint without giving away the answer",
      "explanation": "detailed explanation of why the correct answer is correct",
      "difficulty": "the requested difficulty level"
    }
  ]
}

Rules:
- Each question must have exactly 4 options
- correct_answer is the 0-indexed position of the correct option
- Questions should test understanding, not just memorization
- Include a mix of conceptual and practical questions
- Hints should guide thinking without revealing the answer"""

USER_PROMPT_PROBLEMS = """Create practice problems for the topic: "{topic}".

Generate exactly {count} multiple-choice questions at {difficulty} difficulty level.
Set "difficulty" to "{difficulty}" for every problem."""


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass
class ProblemGenerationResult:
    """Result of a problems request.

    ``problems`` holds plain dicts: stored rows (with id/topic_id) or, in
    preview mode, the parsed problems without ids.
    """

    problems: list[dict[str, Any]] = field(default_factory=list)
    cached: bool = False


class ProblemGenerationError(Exception):
    """Error during problem generation."""

    pass


# =============================================================================
# PROMPT / PARSER
# =============================================================================


def build_problems_prompt(topic: str, difficulty: str, count: int) -> str:
    """Build the user prompt for a batch of problems."""
    return USER_PROMPT_PROBLEMS.format(topic=topic, difficulty=difficulty, count=count)


def parse_problems_reply(
    data: dict[str, Any], difficulty: str, count: int
) -> list[NewProblem]:
    """Validate an LLM reply and convert it to NewProblem entries.

    Keeps the first ``count`` problems; fewer than ``count`` is an error.
    Every problem takes the requested ``difficulty``; the reply's value is ignored.

    Raises:
        ProblemGenerationError: If the reply does not match the schema
    """
    raw_problems = data.get("problems")
    if not isinstance(raw_problems, list):
        raise ProblemGenerationError("Reply contains no problems array")

    if len(raw_problems) < count:
        raise ProblemGenerationError(
            f"Expected {count} problems, got {len(raw_problems)}"
        )

    problems = []
    for index, raw in enumerate(raw_problems[:count]):
        if not isinstance(raw, dict):
            raise ProblemGenerationError(f"Problem {index} is not an object")

        question = str(raw.get("question") or "").strip()
        if not question:
            raise ProblemGenerationError(f"Problem {index} has no question")

        options = raw.get("options")
        if not isinstance(options, list) or len(options) != OPTIONS_PER_PROBLEM:
            raise ProblemGenerationError(
                f"Problem {index} must have exactly {OPTIONS_PER_PROBLEM} options"
            )

        correct = raw.get("correct_answer")
        if (
            not isinstance(correct, int)
            or isinstance(correct, bool)
            or not 0 <= correct < OPTIONS_PER_PROBLEM
        ):
            raise ProblemGenerationError(
                f"Problem {index} has invalid correct_answer: {correct!r}"
            )

        problems.append(
            NewProblem(
                question=question,
                options=[str(o) for o in options],
                correct_answer=correct,
                hint=str(raw.get("hint") or ""),
                explanation=str(raw.get("explanation") or ""),
                difficulty=difficulty,
            )
        )

    return problems


# =============================================================================
# GENERATION
# =============================================================================


def generate_problems(
    topic: str,
    llm: LLMClient,
    content: ContentRepository,
    topic_id: str | None = None,
    difficulty: str = DEFAULT_DIFFICULTY,
    count: int = DEFAULT_COUNT,
) -> ProblemGenerationResult:
    """Return `count` problems for a topic, generating them when needed.

    Args:
        topic: Topic name used in the prompt
        llm: LLM client used on a cache miss
        content: Content repository
        topic_id: Stored topic; without it nothing is read or written
        difficulty: One of PROBLEM_DIFFICULTIES
        count: Number of problems wanted

    Raises:
        ProblemGenerationError: If the LLM reply is unusable
        LLMError: If the LLM call fails
    """
    if topic_id:
        existing = content.list_problems(topic_id, difficulty, count)
        if len(existing) >= count:
            logger.info(
                "problems.cache_hit",
                topic_id=topic_id,
                difficulty=difficulty,
                count=len(existing),
            )
            return ProblemGenerationResult(
                problems=[p.to_dict() for p in existing], cached=True
            )

    logger.info(
        "problems.cache_miss",
        topic=topic,
        topic_id=topic_id,
        difficulty=difficulty,
        count=count,
    )

    data = llm.simple_json(
        SYSTEM_PROMPT_PROBLEMS, build_problems_prompt(topic, difficulty, count)
    )
    problems = parse_problems_reply(data, difficulty, count)

    if not topic_id:
        logger.info("problems.preview", topic=topic, count=len(problems))
        return ProblemGenerationResult(problems=[p.to_dict() for p in problems])

    records = content.insert_problems(topic_id, problems)
    logger.info("problems.generated", topic_id=topic_id, count=len(records))

    return ProblemGenerationResult(problems=[r.to_dict() for r in records])
