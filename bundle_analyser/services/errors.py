"""Errors raised by the measurement pipeline and the snapshot store."""

from __future__ import annotations


class BundleAnalyserError(Exception):
    """Base class for pipeline and store failures."""


class FetchError(BundleAnalyserError):
    """An HTTP request failed or returned a non-2xx status.

    ``status_code`` is ``None`` when no response arrived (timeout, refused
    connection, DNS failure).
    """

    def __init__(self, url: str, status_code: int | None = None, reason: str | None = None):
        self.url = url
        self.status_code = status_code
        self.reason = reason
        if status_code is not None:
            message = f"HTTP error! Status: {status_code} ({url})"
        else:
            message = f"Request to {url} failed: {reason or 'no response'}"
        super().__init__(message)


class ParseError(BundleAnalyserError):
    """The manifest body is not JSON or has no ``imports`` object."""


class StoreError(BundleAnalyserError):
    """A snapshot store operation failed."""


class FilesystemError(BundleAnalyserError):
    """Writing to or removing the staging area failed."""
