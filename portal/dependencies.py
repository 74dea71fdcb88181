"""Shared FastAPI dependencies and factories for the data layer."""

from fastapi import Depends, Request

from portal.client.base import DataClient
from portal.client.rest import RestDataClient
from portal.client.sql import SqlDataClient
from portal.common.cache import DataCache
from portal.config import Settings
from portal.dashboard.service import DashboardService
from portal.database import create_engine, create_session_factory


def create_data_client(settings: Settings) -> DataClient:
    """Build the client selected by ``DATA_BACKEND``."""
    if settings.DATA_BACKEND == "rest":
        return RestDataClient(
            settings.SUPABASE_URL,
            settings.SUPABASE_KEY,
            timeout=settings.REMOTE_TIMEOUT_SECONDS,
        )
    if settings.DATA_BACKEND == "sql":
        engine = create_engine(settings.DATABASE_URL)
        return SqlDataClient(create_session_factory(engine), engine=engine)
    raise ValueError(f"Unsupported DATA_BACKEND '{settings.DATA_BACKEND}'")


def create_cache(settings: Settings) -> DataCache:
    return DataCache(
        default_ttl=settings.CACHE_DEFAULT_TTL_SECONDS,
        realtime_ttl=settings.CACHE_REALTIME_TTL_SECONDS,
    )


async def get_data_client(request: Request) -> DataClient:
    """FastAPI dependency: the app-wide remote data client."""
    return request.app.state.data_client


async def get_cache(request: Request) -> DataCache:
    """FastAPI dependency: the app-wide local cache."""
    return request.app.state.cache


async def get_dashboard_service(
    client: DataClient = Depends(get_data_client),
    cache: DataCache = Depends(get_cache),
) -> DashboardService:
    return DashboardService(client, cache)
