"""Practice problem endpoints."""

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from skillforge.core.problem_generator import DEFAULT_DIFFICULTY, generate_problems
from skillforge.web.schemas import ProblemResponse, ProblemsRequest, ProblemsResponse
from skillforge.web.services import AppServices, get_services

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/problems", tags=["problems"])


@router.post("", response_model=ProblemsResponse)
def get_or_generate_problems(
    request: ProblemsRequest,
    services: AppServices = Depends(get_services),
) -> ProblemsResponse:
    """Return practice problems, generating them when the store has too few.

    Without ``topicId`` the problems are generated but not stored.
    """
    topic = (request.topic or "").strip()
    if not topic:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Topic is required",
        )

    try:
        result = generate_problems(
            topic=topic,
            llm=services.llm,
            content=services.content,
            topic_id=request.topic_id,
            difficulty=request.difficulty or DEFAULT_DIFFICULTY,
            count=request.count,
        )
    except Exception as e:
        logger.exception("problems.failed", topic=topic, topic_id=request.topic_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate problems",
        ) from e

    return ProblemsResponse(
        problems=[ProblemResponse.model_validate(p) for p in result.problems],
        cached=result.cached,
    )
