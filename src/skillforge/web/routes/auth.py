"""Auth endpoints: code callback, signup, login, logout and session lookup.

The session cookie carries the provider's access token and nothing else.
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import RedirectResponse

from skillforge.auth.provider import AuthProviderError, AuthRejectedError, AuthUser
from skillforge.core.profile_service import ensure_signup_profile
from skillforge.web.schemas import (
    AuthUserEnvelope,
    AuthUserResponse,
    LoginRequest,
    SignupRequest,
)
from skillforge.web.services import AppServices, get_services

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _set_session_cookie(
    response: Response, services: AppServices, access_token: str
) -> None:
    auth_config = services.config.auth
    response.set_cookie(
        key=auth_config.cookie_name,
        value=access_token,
        max_age=auth_config.cookie_max_age,
        path="/",
        httponly=True,
        secure=services.config.is_production,
        samesite="lax",
    )


def _user_response(user: AuthUser) -> AuthUserResponse:
    return AuthUserResponse(id=user.id, email=user.email, display_name=user.display_name)


@router.get("/callback")
def auth_callback(
    code: str | None = None,
    services: AppServices = Depends(get_services),
) -> RedirectResponse:
    """Exchange an authorization code for a session and go home."""
    response = RedirectResponse(url="/")

    if not code:
        return response

    try:
        session = services.auth.exchange_code(code)
    except AuthProviderError as e:
        logger.warning("auth.code_exchange_failed", error=str(e))
        return response

    _set_session_cookie(response, services, session.access_token)
    logger.info("auth.session_started", user_id=session.user.id)
    return response


@router.post("/signup", response_model=AuthUserEnvelope)
def signup(
    request: SignupRequest,
    services: AppServices = Depends(get_services),
) -> AuthUserEnvelope:
    """Create a provider user and its profile."""
    if not request.email or not request.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email and password are required",
        )

    try:
        user = services.auth.create_user(
            request.email, request.password, request.display_name
        )
    except AuthRejectedError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e
    except Exception as e:
        logger.exception("auth.signup_failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create account",
        ) from e

    try:
        ensure_signup_profile(
            services.profiles, user.id, request.email, request.display_name
        )
    except Exception:
        # The account exists; the profile is created on the next PUT /api/profile
        logger.exception("auth.signup_profile_failed", user_id=user.id)

    return AuthUserEnvelope(user=_user_response(user))


@router.post("/login", response_model=AuthUserEnvelope)
def login(
    request: LoginRequest,
    response: Response,
    services: AppServices = Depends(get_services),
) -> AuthUserEnvelope:
    """Password sign-in; sets the session cookie."""
    if not request.email or not request.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email and password are required",
        )

    try:
        session = services.auth.sign_in(request.email, request.password)
    except AuthRejectedError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e) or "Invalid login credentials",
        ) from e
    except Exception as e:
        logger.exception("auth.login_failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to sign in",
        ) from e

    _set_session_cookie(response, services, session.access_token)
    return AuthUserEnvelope(user=_user_response(session.user))


@router.post("/logout", response_model=AuthUserEnvelope)
def logout(
    response: Response,
    services: AppServices = Depends(get_services),
) -> AuthUserEnvelope:
    """Drop the session cookie."""
    response.delete_cookie(key=services.config.auth.cookie_name, path="/")
    return AuthUserEnvelope(user=None)


@router.get("/me", response_model=AuthUserEnvelope)
def current_user(
    request: Request,
    services: AppServices = Depends(get_services),
) -> AuthUserEnvelope:
    """Resolve the session cookie to a user; null on any failure."""
    token = request.cookies.get(services.config.auth.cookie_name)
    if not token:
        return AuthUserEnvelope(user=None)

    try:
        user = services.auth.get_user(token)
    except AuthProviderError as e:
        logger.info("auth.lookup_failed", error=str(e))
        return AuthUserEnvelope(user=None)

    if user is None:
        return AuthUserEnvelope(user=None)

    return AuthUserEnvelope(user=_user_response(user))
