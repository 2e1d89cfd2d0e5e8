"""Pydantic schemas for request/response validation."""

from bundle_analyser.schemas.snapshot import (
    ArtifactFailureResponse,
    BundleRunResponse,
    SnapshotResponse,
)

__all__ = ["ArtifactFailureResponse", "BundleRunResponse", "SnapshotResponse"]
