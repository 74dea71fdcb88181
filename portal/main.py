"""Workforce Portal — FastAPI Application Factory."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from portal.admin.router import router as admin_router
from portal.announcements.router import router as announcements_router
from portal.auth.router import router as auth_router
from portal.client.base import DataClient
from portal.common.cache import DataCache
from portal.common.exceptions import register_exception_handlers
from portal.common.rate_limit import limiter
from portal.config import settings
from portal.dashboard.router import router as dashboard_router
from portal.dependencies import create_cache, create_data_client
from portal.leave.router import router as leave_router
from portal.profiles.router import router as profiles_router
from portal.project_updates.router import router as project_updates_router
from portal.tasks.router import router as tasks_router

VERSION = "1.0.0"

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown events."""
    # Startup: build whatever was not injected by the caller
    owns_client = getattr(app.state, "data_client", None) is None
    if owns_client:
        app.state.data_client = create_data_client(settings)
    if getattr(app.state, "cache", None) is None:
        app.state.cache = create_cache(settings)

    cache: DataCache = app.state.cache
    cache.start_sweeper(settings.CACHE_SWEEP_INTERVAL_SECONDS)
    logger.info("Portal started (backend=%s, env=%s)", settings.DATA_BACKEND, settings.ENVIRONMENT)
    yield
    # Shutdown
    await cache.stop_sweeper()
    if owns_client:
        await app.state.data_client.close()


def create_app(
    data_client: Optional[DataClient] = None,
    cache: Optional[DataCache] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    A pre-built ``data_client`` or ``cache`` is used as-is; otherwise both
    are created from settings at startup.
    """
    configure_logging()

    app = FastAPI(
        title="Workforce Portal",
        description="Employee directory, leave, tasks, announcements, project updates and dashboard",
        version=VERSION,
        docs_url="/api/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url="/api/redoc" if settings.ENVIRONMENT != "production" else None,
        lifespan=lifespan,
    )
    app.state.data_client = data_client
    app.state.cache = cache

    # Exception handlers (RFC 7807)
    register_exception_handlers(app)

    # Rate limiting (slowapi)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health check (no auth)
    @app.get("/api/v1/health", tags=["system"])
    async def health_check():
        return {
            "status": "healthy",
            "version": VERSION,
            "environment": settings.ENVIRONMENT,
            "backend": settings.DATA_BACKEND,
        }

    # Register routers
    app.include_router(auth_router, prefix="/api/v1/auth", tags=["auth"])
    app.include_router(profiles_router, prefix="/api/v1/profiles", tags=["profiles"])
    app.include_router(admin_router, prefix="/api/v1/admin", tags=["admin"])
    app.include_router(leave_router, prefix="/api/v1/leave", tags=["leave"])
    app.include_router(tasks_router, prefix="/api/v1/tasks", tags=["tasks"])
    app.include_router(announcements_router, prefix="/api/v1/announcements", tags=["announcements"])
    app.include_router(
        project_updates_router, prefix="/api/v1/project-updates", tags=["project-updates"],
    )
    app.include_router(dashboard_router, prefix="/api/v1/dashboard", tags=["dashboard"])

    return app


app = create_app()
