"""Session reflection endpoint."""

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from skillforge.core.reflection_generator import SessionSummary, generate_reflection
from skillforge.web.schemas import ReflectionBody, ReflectionRequest, ReflectionResponse
from skillforge.web.services import AppServices, get_services

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/reflection", tags=["reflection"])


@router.post("", response_model=ReflectionResponse)
def reflect_on_session(
    request: ReflectionRequest,
    services: AppServices = Depends(get_services),
) -> ReflectionResponse:
    """Generate coaching feedback for a finished session (not stored)."""
    topic = (request.topic or "").strip()
    if not topic:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Topic is required",
        )

    session = SessionSummary(
        topic=topic,
        problems_solved=request.problems_solved,
        problems_correct=request.problems_correct,
        concepts_completed=request.concepts_completed,
        time_spent=str(request.time_spent) if request.time_spent is not None else None,
    )

    try:
        reflection = generate_reflection(session, services.llm)
    except Exception as e:
        logger.exception("reflection.failed", topic=topic, user_id=request.user_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate reflection",
        ) from e

    return ReflectionResponse(reflection=ReflectionBody.model_validate(reflection.to_dict()))
