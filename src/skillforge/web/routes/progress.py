"""Progress endpoints."""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status

from skillforge.core.progress_tracker import (
    ProgressValidationError,
    get_overview,
    record_progress,
)
from skillforge.db.progress_repository import ProgressDelta
from skillforge.web.schemas import (
    AchievementResponse,
    ProgressOverviewResponse,
    ProgressRowResponse,
    ProgressUpdateRequest,
    ProgressUpdateResponse,
    StatsResponse,
)
from skillforge.web.services import AppServices, get_services

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/progress", tags=["progress"])


@router.get("", response_model=ProgressOverviewResponse)
def get_progress(
    user_id: str | None = Query(default=None, alias="userId"),
    services: AppServices = Depends(get_services),
) -> ProgressOverviewResponse:
    """Progress rows of a user plus dashboard stats and achievements."""
    try:
        overview = get_overview(services.progress, user_id)
    except Exception as e:
        logger.exception("progress.fetch_failed", user_id=user_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch progress",
        ) from e

    stats = overview.stats
    return ProgressOverviewResponse(
        progress=[ProgressRowResponse.model_validate(p) for p in overview.progress],
        stats=StatsResponse(
            total_xp=stats.total_xp,
            total_problems=stats.total_problems,
            total_correct=stats.total_correct,
            accuracy=stats.accuracy,
            concepts_learned=stats.concepts_learned,
            streak=stats.streak,
            topics_studied=stats.topics_studied,
            level=stats.level,
            level_xp=stats.level_xp,
        ),
        achievements=[AchievementResponse(**a.to_dict()) for a in overview.achievements],
    )


@router.post("", response_model=ProgressUpdateResponse)
def update_progress(
    request: ProgressUpdateRequest,
    services: AppServices = Depends(get_services),
) -> ProgressUpdateResponse:
    """Add the given increments to the (user, topic) progress row."""
    if not request.topic_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Topic ID is required",
        )

    delta = ProgressDelta(
        concepts_completed=request.concepts_completed,
        problems_solved=request.problems_solved,
        problems_correct=request.problems_correct,
        xp_earned=request.xp_earned,
    )

    try:
        record = record_progress(
            progress=services.progress,
            content=services.content,
            topic_id=request.topic_id,
            delta=delta,
            user_id=request.user_id,
        )
    except ProgressValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e
    except Exception as e:
        logger.exception("progress.update_failed", topic_id=request.topic_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update progress",
        ) from e

    return ProgressUpdateResponse(progress=ProgressRowResponse.model_validate(record))
