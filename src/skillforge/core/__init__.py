"""Core business logic: content generation, progress and profiles."""

from skillforge.core.concept_generator import ConceptGenerationError, generate_concepts
from skillforge.core.problem_generator import ProblemGenerationError, generate_problems
from skillforge.core.profile_service import ProfileExistsError
from skillforge.core.progress_tracker import ProgressValidationError, record_progress
from skillforge.core.reflection_generator import (
    ReflectionGenerationError,
    generate_reflection,
)

__all__ = [
    "ConceptGenerationError",
    "ProblemGenerationError",
    "ProfileExistsError",
    "ProgressValidationError",
    "ReflectionGenerationError",
    "generate_concepts",
    "generate_problems",
    "generate_reflection",
    "record_progress",
]
