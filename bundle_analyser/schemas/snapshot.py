"""Snapshot schemas for API responses."""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SnapshotResponse(BaseModel):
    """One stored snapshot as returned to clients."""

    date: datetime
    sizes: dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(from_attributes=True)

    @field_validator("date")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        """Stored dates are naive UTC; tag them so they serialize with a ``Z``."""
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class ArtifactFailureResponse(BaseModel):
    """An artifact left out of a snapshot because it could not be measured."""

    url: str
    app_name: str
    error: str


class BundleRunResponse(SnapshotResponse):
    """Result of one ``/bundle`` run.

    The snapshot fields come first so callers that only read ``date`` and
    ``sizes`` keep working. ``partial`` is true when any artifact failed.
    """

    failed: list[ArtifactFailureResponse] = Field(default_factory=list)
    partial: bool = False
