"""FastAPI application factory.

Main entry point for the SkillForge Web API.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from skillforge import __version__
from skillforge.config.app_config import load_app_config
from skillforge.web.errors import register_exception_handlers
from skillforge.web.routes import (
    auth_router,
    concepts_router,
    health_router,
    problems_router,
    profile_router,
    progress_router,
    reflection_router,
)
from skillforge.web.services import AppServices

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build services from configuration unless they were injected."""
    if app.state.services is None:
        config = load_app_config()
        app.state.services = AppServices.from_config(config)
        app.state.services.database.init_schema()

    services: AppServices = app.state.services
    logger.info(
        "api_startup",
        environment=services.config.environment,
        database=str(services.database.path),
        llm_provider=services.llm.config.provider,
        llm_model=services.llm.config.model,
    )
    yield


def create_app(services: AppServices | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        services: Pre-built services (tests pass fakes); built at startup if None

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="SkillForge API",
        description="Generated concepts, practice problems and progress tracking",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    if services is not None:
        services.database.init_schema()
    app.state.services = services

    # CORS middleware for web clients
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(concepts_router)
    app.include_router(problems_router)
    app.include_router(reflection_router)
    app.include_router(progress_router)
    app.include_router(profile_router)
    app.include_router(auth_router)

    return app


# Default app instance for uvicorn
app = create_app()
