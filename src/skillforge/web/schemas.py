"""Pydantic schemas for Web API.

Request bodies accept camelCase keys (snake_case works too). Stored rows are
returned with their column names; computed payloads (stats, reflection, auth
user) are camelCase.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from skillforge import __version__


class CamelModel(BaseModel):
    """Base for payloads exchanged in camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorResponse(BaseModel):
    """Body of every error response."""

    error: str


# =============================================================================
# CONTENT SCHEMAS
# =============================================================================


class TopicResponse(BaseModel):
    """A stored topic."""

    id: str
    name: str
    category: str
    description: str
    created_at: str

    model_config = {"from_attributes": True}


class ConceptResponse(BaseModel):
    """A stored concept."""

    id: str
    topic_id: str
    title: str
    content: str
    difficulty: str
    order_index: int
    created_at: str

    model_config = {"from_attributes": True}


class ConceptsRequest(CamelModel):
    """Request to get or generate the concepts of a topic."""

    topic: str | None = Field(default=None, max_length=200)
    user_id: str | None = None


class ConceptsResponse(BaseModel):
    """Concepts of a topic and whether they came from the store."""

    topic: TopicResponse
    concepts: list[ConceptResponse]
    cached: bool


class ProblemResponse(BaseModel):
    """A problem; id/topic_id/created_at are absent in preview mode."""

    id: str | None = None
    topic_id: str | None = None
    question: str
    options: list[str]
    correct_answer: int
    hint: str
    explanation: str
    difficulty: str
    created_at: str | None = None


class ProblemsRequest(CamelModel):
    """Request to get or generate practice problems."""

    topic: str | None = Field(default=None, max_length=200)
    topic_id: str | None = None
    difficulty: Literal["easy", "medium", "hard", "expert"] | None = None
    count: int = Field(default=5, ge=1, le=20)


class ProblemsResponse(BaseModel):
    """Problems and whether they came from the store."""

    problems: list[ProblemResponse]
    cached: bool


# =============================================================================
# REFLECTION SCHEMAS
# =============================================================================


class ReflectionRequest(CamelModel):
    """Statistics of a finished learning session."""

    user_id: str | None = None
    topic: str | None = Field(default=None, max_length=200)
    problems_solved: int = Field(default=0, ge=0)
    problems_correct: int = Field(default=0, ge=0)
    concepts_completed: int = Field(default=0, ge=0)
    time_spent: str | int | None = None


class ReflectionBody(CamelModel):
    """Coaching feedback for a session."""

    summary: str
    strengths: list[str]
    improvements: list[str]
    next_steps: list[str]
    encouragement: str
    xp_earned: int
    badges: list[str]


class ReflectionResponse(BaseModel):
    reflection: ReflectionBody


# =============================================================================
# PROGRESS SCHEMAS
# =============================================================================


class ProgressRowResponse(BaseModel):
    """A stored (user, topic) progress row."""

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
    topic: TopicResponse | None = None

    model_config = {"from_attributes": True}


class StatsResponse(CamelModel):
    """Dashboard summary of a user's progress."""

    total_xp: int
    total_problems: int
    total_correct: int
    accuracy: int
    concepts_learned: int
    streak: int
    topics_studied: int
    level: int
    level_xp: int


class AchievementResponse(BaseModel):
    name: str
    description: str
    unlocked: bool


class ProgressOverviewResponse(BaseModel):
    progress: list[ProgressRowResponse]
    stats: StatsResponse
    achievements: list[AchievementResponse]


class ProgressUpdateRequest(CamelModel):
    """Increments to add to a (user, topic) progress row."""

    user_id: str | None = None
    topic_id: str | None = None
    concepts_completed: int = 0
    problems_solved: int = 0
    problems_correct: int = 0
    xp_earned: int = 0


class ProgressUpdateResponse(BaseModel):
    progress: ProgressRowResponse


# =============================================================================
# PROFILE SCHEMAS
# =============================================================================


ExperienceLevel = Literal["beginner", "intermediate", "advanced", "expert"]


class ProfileRequest(CamelModel):
    """Profile fields; on update only the keys present are changed."""

    user_id: str | None = None
    display_name: str | None = Field(default=None, max_length=100)
    email: str | None = Field(default=None, max_length=200)
    avatar_url: str | None = Field(default=None, max_length=500)
    bio: str | None = Field(default=None, max_length=2000)
    learning_goals: list[str] | None = None
    preferred_topics: list[str] | None = None
    experience_level: ExperienceLevel | None = None
    daily_goal_minutes: int | None = Field(default=None, ge=1, le=1440)
    notifications_enabled: bool | None = None

    def provided_fields(self) -> dict:
        """Profile fields explicitly present in the request body."""
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if name != "user_id"
        }


class ProfileResponse(BaseModel):
    """A stored profile."""

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

    model_config = {"from_attributes": True}


class ProfileEnvelope(BaseModel):
    profile: ProfileResponse | None


# =============================================================================
# AUTH SCHEMAS
# =============================================================================


class SignupRequest(CamelModel):
    email: str | None = Field(default=None, max_length=200)
    password: str | None = Field(default=None, max_length=200)
    display_name: str | None = Field(default=None, max_length=100)


class LoginRequest(CamelModel):
    email: str | None = Field(default=None, max_length=200)
    password: str | None = Field(default=None, max_length=200)


class AuthUserResponse(CamelModel):
    id: str
    email: str | None
    display_name: str | None


class AuthUserEnvelope(BaseModel):
    user: AuthUserResponse | None


# =============================================================================
# HEALTH SCHEMAS
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str = __version__
    timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )
