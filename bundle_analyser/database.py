"""Database engine and session factory."""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from bundle_analyser.config import settings


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


engine_options: dict[str, Any] = {"pool_pre_ping": True}
if settings.is_testing:
    # Each test runs on its own event loop; pooled aiosqlite connections are bound to one loop.
    engine_options["poolclass"] = NullPool

# Sessions check connections out of the engine pool and return them on close.
engine = create_async_engine(settings.database_url, **engine_options)

AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
