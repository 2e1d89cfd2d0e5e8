"""Artifact naming and download helpers."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Any, Mapping
from urllib.parse import unquote, urlparse

import aiofiles
import aiofiles.os
import httpx

from bundle_analyser.logging_config import get_logger
from bundle_analyser.services.errors import FetchError, FilesystemError

logger = get_logger(__name__)

UNKNOWN_APP = "unknown-app"
DEFAULT_FILE_NAME = "index.js"

# Leftmost run of non-slash characters ending in "-app"; greedy, so
# "my-app-app" yields the whole token.
_APP_NAME_RE = re.compile(r"[^/]+-app")


@dataclass(frozen=True)
class Artifact:
    """One script from the import map."""

    module: str
    url: str
    file_name: str
    app_name: str


def derive_app_name(url: str) -> str:
    """Return the ``<name>-app`` token in ``url``, or ``unknown-app``."""
    match = _APP_NAME_RE.search(url)
    return match.group(0) if match else UNKNOWN_APP


def derive_file_name(url: str) -> str:
    """Return the last path segment of ``url``, ignoring query and fragment."""
    name = PurePosixPath(unquote(urlparse(url).path)).name
    return name or DEFAULT_FILE_NAME


def resolve_artifacts(import_map: Mapping[str, Any]) -> list[Artifact]:
    """Turn an import map into artifacts, keeping manifest order."""
    artifacts: list[Artifact] = []
    for module, url in import_map.items():
        if not isinstance(url, str) or not url:
            logger.warning("Skipping import map entry %r: expected a URL, got %r", module, url)
            continue
        artifacts.append(
            Artifact(
                module=module,
                url=url,
                file_name=derive_file_name(url),
                app_name=derive_app_name(url),
            )
        )
    return artifacts


async def download_artifact(client: httpx.AsyncClient, url: str, destination: Path) -> int:
    """Download ``url`` to ``destination`` and return the size of the written file.

    The size is read back from disk, so it counts the bytes actually persisted
    rather than what a Content-Length header claims.

    Raises:
        FetchError: the request failed or the status was not 2xx
        FilesystemError: the file could not be written or measured
    """
    try:
        response = await client.get(url)
    except httpx.HTTPError as exc:
        raise FetchError(url, reason=str(exc)) from exc

    if not response.is_success:
        raise FetchError(url, status_code=response.status_code)

    try:
        async with aiofiles.open(destination, "wb") as buffer:
            await buffer.write(response.content)
        file_size = (await aiofiles.os.stat(destination)).st_size
    except OSError as exc:
        raise FilesystemError(f"Failed to write {destination}: {exc}") from exc

    logger.info("Downloaded: %s (%s bytes)", destination, file_size)
    return file_size
