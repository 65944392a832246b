"""Profile endpoints."""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from skillforge.core.profile_service import (
    ProfileExistsError,
    create_profile,
    get_profile,
    upsert_profile,
)
from skillforge.web.schemas import ProfileEnvelope, ProfileRequest, ProfileResponse
from skillforge.web.services import AppServices, get_services

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/profile", tags=["profile"])


def _require_user_id(user_id: str | None) -> str:
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User ID is required",
        )
    return user_id


@router.get("", response_model=ProfileEnvelope)
def read_profile(
    user_id: str | None = Query(default=None, alias="userId"),
    services: AppServices = Depends(get_services),
) -> ProfileEnvelope:
    """Get a user's profile; ``profile`` is null when none exists yet."""
    user_id = _require_user_id(user_id)

    try:
        record = get_profile(services.profiles, user_id)
    except Exception as e:
        logger.exception("profile.fetch_failed", user_id=user_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to fetch profile",
        ) from e

    return ProfileEnvelope(
        profile=ProfileResponse.model_validate(record) if record else None
    )


@router.post("", response_model=ProfileEnvelope, status_code=status.HTTP_201_CREATED)
def create_user_profile(
    request: ProfileRequest,
    services: AppServices = Depends(get_services),
) -> ProfileEnvelope:
    """Create a profile. Fails with 409 if the user already has one."""
    user_id = _require_user_id(request.user_id)

    try:
        record = create_profile(services.profiles, user_id, request.provided_fields())
    except ProfileExistsError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Profile already exists. Use PUT to update.",
        ) from e
    except Exception as e:
        logger.exception("profile.create_failed", user_id=user_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create profile",
        ) from e

    return ProfileEnvelope(profile=ProfileResponse.model_validate(record))


@router.put("", response_model=ProfileEnvelope)
def update_user_profile(
    request: ProfileRequest,
    response: Response,
    services: AppServices = Depends(get_services),
) -> ProfileEnvelope:
    """Update the fields present in the body; creates the profile if absent (201)."""
    user_id = _require_user_id(request.user_id)

    try:
        record, created = upsert_profile(
            services.profiles, user_id, request.provided_fields()
        )
    except Exception as e:
        logger.exception("profile.update_failed", user_id=user_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update profile",
        ) from e

    if created:
        response.status_code = status.HTTP_201_CREATED

    return ProfileEnvelope(profile=ProfileResponse.model_validate(record))
