"""Authentication boundary delegating to the managed auth provider."""

from skillforge.auth.provider import (
    AuthNotConfiguredError,
    AuthProviderError,
    AuthRejectedError,
    AuthSession,
    AuthUser,
    SupabaseAuthProvider,
)

__all__ = [
    "AuthNotConfiguredError",
    "AuthProviderError",
    "AuthRejectedError",
    "AuthSession",
    "AuthUser",
    "SupabaseAuthProvider",
]
