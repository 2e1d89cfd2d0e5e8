"""Database migration utilities for application startup."""

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config
from alembic.script import ScriptDirectory
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger("bundle_analyser.migrations")

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"


def get_alembic_config() -> Config:
    """Get Alembic configuration object.

    Returns:
        Config pointing at the bundled migration scripts
    """
    from bundle_analyser.config import settings

    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_DIR))
    config.set_main_option("sqlalchemy.url", settings.database_url)
    return config


async def check_migration_status(engine: AsyncEngine) -> tuple[str, str]:
    """Check current database migration status.

    Args:
        engine: AsyncEngine instance

    Returns:
        Tuple of (current_revision, head_revision)
    """
    try:
        config = get_alembic_config()

        async with engine.begin() as conn:
            result = await conn.execute(text("SELECT version_num FROM alembic_version"))
            current = result.scalar_one_or_none()

        script_dir = ScriptDirectory.from_config(config)
        head = script_dir.get_current_head()

        return (current or "none", head or "none")

    except Exception as e:
        logger.warning(f"Could not check migration status: {e}")
        return ("unknown", "unknown")


def upgrade_database(revision: str = "head") -> None:
    """Apply migrations up to ``revision``. Must not be called from a running event loop."""
    config = get_alembic_config()
    logger.info("Running database migrations...")
    command.upgrade(config, revision)
    logger.info("Database migrations completed successfully")


async def initialize_database(engine: AsyncEngine) -> None:
    """Create any missing tables.

    Args:
        engine: AsyncEngine instance
    """
    from bundle_analyser.database import Base
    from bundle_analyser import models  # noqa: F401

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema initialized")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        raise
