"""Concept endpoints."""

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from skillforge.core.concept_generator import generate_concepts
from skillforge.web.schemas import (
    ConceptResponse,
    ConceptsRequest,
    ConceptsResponse,
    TopicResponse,
)
from skillforge.web.services import AppServices, get_services

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/concepts", tags=["concepts"])


@router.post("", response_model=ConceptsResponse)
def get_or_generate_concepts(
    request: ConceptsRequest,
    services: AppServices = Depends(get_services),
) -> ConceptsResponse:
    """Return the concepts of a topic, generating them on first request."""
    topic = (request.topic or "").strip()
    if not topic:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Topic is required",
        )

    try:
        result = generate_concepts(
            topic=topic,
            llm=services.llm,
            content=services.content,
            progress=services.progress,
            user_id=request.user_id,
        )
    except Exception as e:
        logger.exception("concepts.failed", topic=topic)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate concepts",
        ) from e

    return ConceptsResponse(
        topic=TopicResponse.model_validate(result.topic),
        concepts=[ConceptResponse.model_validate(c) for c in result.concepts],
        cached=result.cached,
    )
