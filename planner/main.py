"""
Planner FastAPI Application Entry Point.

Run with: uvicorn planner.main:app --reload
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from planner import __version__
from planner.api.routes import assignments, groups, notifications
from planner.config import Settings, get_settings
from planner.container import PlannerContainer

logger = logging.getLogger(__name__)


def create_app(
    container: PlannerContainer | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """
    Build the application.

    Without a container one is built from the settings at startup and
    disposed on shutdown. A container passed in (tests) is left to its owner.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan manager for startup/shutdown."""
        owned = container is None
        app.state.container = PlannerContainer.from_settings(settings) if owned else container
        await app.state.container.startup(settings)
        logger.info("%s started (%s)", settings.app_name, settings.environment)
        yield
        if owned:
            await app.state.container.aclose()

    app = FastAPI(
        title=settings.app_name,
        description="Assignment reminders and class group reconciliation API",
        version=__version__,
        lifespan=lifespan,
    )
    if container is not None:
        app.state.container = container

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(assignments.router)
    app.include_router(notifications.router)
    app.include_router(groups.router)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app()
