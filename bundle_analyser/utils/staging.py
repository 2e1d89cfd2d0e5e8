"""Staging area for downloaded artifacts."""

import shutil
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from bundle_analyser.logging_config import get_logger
from bundle_analyser.services.errors import FilesystemError

logger = get_logger(__name__)


def cleanup_staging(staging_dir: Path) -> bool:
    """
    Remove the staging directory and everything in it.

    A missing directory counts as success. Other failures are logged and
    never raised.

    Args:
        staging_dir: Directory to remove

    Returns:
        True if the directory is gone afterwards
    """
    try:
        shutil.rmtree(staging_dir)
    except FileNotFoundError:
        return True
    except OSError as e:
        logger.error(f"Error deleting staging folder {staging_dir}: {e}")
        return False
    logger.info(f"Deleted staging folder: {staging_dir}")
    return True


@asynccontextmanager
async def staging_area(staging_dir: Path) -> AsyncIterator[Path]:
    """
    Create ``staging_dir`` for the duration of a run and remove it afterwards.

    Removal runs on every exit path, including errors raised by the body.

    Raises:
        FilesystemError: If the directory cannot be created
    """
    try:
        staging_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemError(f"Failed to create staging folder {staging_dir}: {e}") from e
    try:
        yield staging_dir
    finally:
        cleanup_staging(staging_dir)
