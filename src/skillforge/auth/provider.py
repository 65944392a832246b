"""Auth provider boundary (Supabase Auth).

All password, code and token validation happens at the provider; this module
only shapes requests and responses. Clients are created lazily so the API can
start without auth credentials configured.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog
from supabase import Client, create_client

from skillforge.config.app_config import AuthConfig

logger = structlog.get_logger(__name__)


@dataclass
class AuthUser:
    """Identity resolved by the provider."""

    id: str
    email: str | None
    display_name: str | None = None


@dataclass
class AuthSession:
    """Session issued by the provider."""

    access_token: str
    user: AuthUser


class AuthProviderError(Exception):
    """Error talking to the auth provider."""

    pass


class AuthNotConfiguredError(AuthProviderError):
    """Provider URL or key missing from the environment."""

    pass


class AuthRejectedError(AuthProviderError):
    """The provider refused the credentials, code or signup data."""

    pass


def _to_auth_user(user: Any) -> AuthUser:
    metadata = getattr(user, "user_metadata", None) or {}
    return AuthUser(
        id=str(user.id),
        email=getattr(user, "email", None),
        display_name=metadata.get("display_name"),
    )


def _wrap_error(action: str, error: Exception) -> AuthProviderError:
    """Map a provider exception: 4xx answers are rejections, the rest failures."""
    status = getattr(error, "status", None)
    if isinstance(status, int) and 400 <= status < 500:
        return AuthRejectedError(str(error))
    return AuthProviderError(f"Auth provider {action} failed: {error}")


class SupabaseAuthProvider:
    """Supabase Auth client wrapper."""

    def __init__(
        self,
        url: str | None,
        anon_key: str | None,
        service_key: str | None = None,
    ):
        self._url = url
        self._anon_key = anon_key
        self._service_key = service_key
        self._public: Client | None = None
        self._admin: Client | None = None

    @classmethod
    def from_config(cls, config: AuthConfig) -> SupabaseAuthProvider:
        return cls(
            url=config.get_url(),
            anon_key=config.get_anon_key(),
            service_key=config.get_service_key(),
        )

    def _public_client(self) -> Client:
        if self._public is None:
            if not self._url or not self._anon_key:
                raise AuthNotConfiguredError("Supabase URL or anon key not configured")
            self._public = create_client(self._url, self._anon_key)
        return self._public

    def _admin_client(self) -> Client:
        if self._admin is None:
            if not self._url or not self._service_key:
                raise AuthNotConfiguredError(
                    "Supabase URL or service role key not configured"
                )
            self._admin = create_client(self._url, self._service_key)
        return self._admin

    def exchange_code(self, code: str) -> AuthSession:
        """Exchange an OAuth/magic-link authorization code for a session."""
        client = self._public_client()
        try:
            response = client.auth.exchange_code_for_session({"auth_code": code})
        except Exception as e:
            raise _wrap_error("code exchange", e) from e

        if response.session is None or response.user is None:
            raise AuthRejectedError("Code exchange returned no session")

        return AuthSession(
            access_token=response.session.access_token,
            user=_to_auth_user(response.user),
        )

    def sign_in(self, email: str, password: str) -> AuthSession:
        """Password sign-in."""
        client = self._public_client()
        try:
            response = client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except Exception as e:
            raise _wrap_error("sign-in", e) from e

        if response.session is None or response.user is None:
            raise AuthRejectedError("Invalid login credentials")

        return AuthSession(
            access_token=response.session.access_token,
            user=_to_auth_user(response.user),
        )

    def get_user(self, access_token: str) -> AuthUser | None:
        """Resolve an access token to its user, None if the provider has none."""
        client = self._public_client()
        try:
            response = client.auth.get_user(access_token)
        except Exception as e:
            raise _wrap_error("user lookup", e) from e

        if response is None or response.user is None:
            return None

        return _to_auth_user(response.user)

    def create_user(
        self, email: str, password: str, display_name: str | None = None
    ) -> AuthUser:
        """Create a confirmed user carrying display_name metadata."""
        client = self._admin_client()
        try:
            response = client.auth.admin.create_user(
                {
                    "email": email,
                    "password": password,
                    "email_confirm": True,
                    "user_metadata": {"display_name": display_name},
                }
            )
        except Exception as e:
            raise _wrap_error("signup", e) from e

        if response.user is None:
            raise AuthRejectedError("Provider did not return the created user")

        logger.info("auth.user_created", user_id=str(response.user.id))
        return _to_auth_user(response.user)
