"""Session reflection generation.

Turns the statistics of a finished learning session into coaching feedback.
Reflections are returned to the caller and never stored.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import structlog

from skillforge.core.progress_tracker import accuracy_percent, estimate_session_xp
from skillforge.llm.client import LLMClient

logger = structlog.get_logger(__name__)

SYSTEM_PROMPT_REFLECTION = """You are an encouraging learning coach. Be encouraging but honest. If accuracy is low, focus on growth mindset.

Respond ONLY with a valid JSON object with this exact structure:
{
  "summary": "A 2-3 sentence summary of their performance",
  "strengths": ["strength 1", "strength 2"],
  "improvements": ["area to improve 1", "area to improve 2"],
  "nextSteps": ["recommended next step 1", "recommended next step 2"],
  "encouragement": "An encouraging message (1-2 sentences)",
  "xpEarned": 0,
  "badges": ["badge name if earned"]
}

xpEarned: 10 per concept, 20 per correct problem, bonus for high accuracy."""

USER_PROMPT_REFLECTION = """Generate a personalized reflection for a student who just completed a learning session.

Session details:
- Topic: {topic}
- Concepts completed: {concepts_completed}
- Problems solved: {problems_solved}
- Problems correct: {problems_correct}
- Accuracy: {accuracy}%
- Time spent: {time_spent}"""


@dataclass
class SessionSummary:
    """Statistics of one learning session."""

    topic: str
    problems_solved: int = 0
    problems_correct: int = 0
    concepts_completed: int = 0
    time_spent: str | None = None

    @property
    def accuracy(self) -> int:
        return accuracy_percent(self.problems_correct, self.problems_solved)


@dataclass
class Reflection:
    """Coaching feedback for a session."""

    summary: str
    encouragement: str
    xp_earned: int
    strengths: list[str] = field(default_factory=list)
    improvements: list[str] = field(default_factory=list)
    next_steps: list[str] = field(default_factory=list)
    badges: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the camelCase shape the clients consume."""
        return {
            "summary": self.summary,
            "strengths": self.strengths,
            "improvements": self.improvements,
            "nextSteps": self.next_steps,
            "encouragement": self.encouragement,
            "xpEarned": self.xp_earned,
            "badges": self.badges,
        }


class ReflectionGenerationError(Exception):
    """Error during reflection generation."""

    pass


def build_reflection_prompt(session: SessionSummary) -> str:
    """Build the user prompt describing the session."""
    return USER_PROMPT_REFLECTION.format(
        topic=session.topic,
        concepts_completed=session.concepts_completed,
        problems_solved=session.problems_solved,
        problems_correct=session.problems_correct,
        accuracy=session.accuracy,
        time_spent=session.time_spent or "unknown",
    )


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item) for item in value if str(item).strip()]


def parse_reflection_reply(data: dict[str, Any], session: SessionSummary) -> Reflection:
    """Validate an LLM reply and convert it to a Reflection.

    A missing or non-numeric ``xpEarned`` falls back to estimate_session_xp.

    Raises:
        ReflectionGenerationError: If the reply has no summary
    """
    summary = str(data.get("summary") or "").strip()
    if not summary:
        raise ReflectionGenerationError("Reply contains no summary")

    xp = data.get("xpEarned")
    if isinstance(xp, bool) or not isinstance(xp, (int, float)) or xp < 0:
        xp = estimate_session_xp(
            session.concepts_completed, session.problems_solved, session.problems_correct
        )

    return Reflection(
        summary=summary,
        encouragement=str(data.get("encouragement") or "").strip(),
        xp_earned=int(xp),
        strengths=_string_list(data.get("strengths")),
        improvements=_string_list(data.get("improvements")),
        next_steps=_string_list(data.get("nextSteps")),
        badges=_string_list(data.get("badges")),
    )


def generate_reflection(session: SessionSummary, llm: LLMClient) -> Reflection:
    """Ask the LLM to reflect on a session.

    Raises:
        ReflectionGenerationError: If the LLM reply is unusable
        LLMError: If the LLM call fails
    """
    data = llm.simple_json(SYSTEM_PROMPT_REFLECTION, build_reflection_prompt(session))
    reflection = parse_reflection_reply(data, session)

    logger.info(
        "reflection.generated",
        topic=session.topic,
        accuracy=session.accuracy,
        xp_earned=reflection.xp_earned,
    )
    return reflection
