"""Route handlers for Web API."""

from skillforge.web.routes.auth import router as auth_router
from skillforge.web.routes.concepts import router as concepts_router
from skillforge.web.routes.health import router as health_router
from skillforge.web.routes.problems import router as problems_router
from skillforge.web.routes.profile import router as profile_router
from skillforge.web.routes.progress import router as progress_router
from skillforge.web.routes.reflection import router as reflection_router

__all__ = [
    "auth_router",
    "concepts_router",
    "health_router",
    "problems_router",
    "profile_router",
    "progress_router",
    "reflection_router",
]
