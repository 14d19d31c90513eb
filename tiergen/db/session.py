"""
Async SQLAlchemy engine factory.
The engine is only used to read catalog metadata; generation itself never connects.
"""
from __future__ import annotations

from sqlalchemy.engine import URL
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from tiergen.core.config import Settings, settings as default_settings


def create_engine(settings: Settings | None = None, url: URL | str | None = None) -> AsyncEngine:
    settings = settings or default_settings
    return create_async_engine(
        url if url is not None else settings.sqlalchemy_url,
        echo=settings.DEBUG,
        pool_pre_ping=True,
    )
