"""Import map retrieval."""

from __future__ import annotations

import json

import httpx

from bundle_analyser.logging_config import get_logger
from bundle_analyser.services.errors import FetchError, ParseError

logger = get_logger(__name__)

ImportMap = dict[str, str]


async def fetch_import_map(client: httpx.AsyncClient, url: str) -> ImportMap:
    """Download the manifest at ``url`` and return its ``imports`` mapping.

    Raises:
        FetchError: the request failed or the status was not 2xx
        ParseError: the body is not JSON or ``imports`` is missing or not an object
    """
    try:
        response = await client.get(url)
    except httpx.HTTPError as exc:
        logger.error("Error fetching import map: %s", exc)
        raise FetchError(url, reason=str(exc)) from exc

    if not response.is_success:
        logger.error("Error fetching import map: HTTP %s from %s", response.status_code, url)
        raise FetchError(url, status_code=response.status_code)

    try:
        document = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ParseError(f"Import map at {url} is not valid JSON: {exc}") from exc

    if not isinstance(document, dict) or "imports" not in document:
        raise ParseError(f"Import map at {url} has no 'imports' field")

    imports = document["imports"]
    if not isinstance(imports, dict):
        raise ParseError(f"Import map at {url} has a non-object 'imports' field")

    logger.info("Fetched import map with %s entries from %s", len(imports), url)
    return imports
