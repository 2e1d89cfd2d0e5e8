"""Snapshot aggregation."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from bundle_analyser.logging_config import get_logger
from bundle_analyser.utils.clock import utcnow

logger = get_logger(__name__)

_HUNDREDTHS = Decimal("0.01")


@dataclass(frozen=True)
class SnapshotRecord:
    """A dated set of artifact sizes. ``date`` is naive UTC."""

    date: datetime
    sizes: dict[str, str] = field(default_factory=dict)

    def to_document(self) -> dict:
        return {"date": self.date.isoformat() + "Z", "sizes": dict(self.sizes)}


def format_size(size_bytes: int) -> str:
    """Format a byte count as kilobytes with two decimals, e.g. ``"1.50 KB"``.

    Halves round up, so 128 bytes is ``"0.13 KB"``.
    """
    kilobytes = (Decimal(size_bytes) / 1024).quantize(_HUNDREDTHS, rounding=ROUND_HALF_UP)
    return f"{kilobytes} KB"


def aggregate(measurements: Iterable[tuple[str, int]]) -> SnapshotRecord:
    """Build a snapshot from ``(app_name, size_bytes)`` pairs.

    A repeated app name replaces the earlier size; each replacement is logged.
    The date is taken once every measurement has been consumed.
    """
    sizes: dict[str, str] = {}
    for app_name, size_bytes in measurements:
        formatted = format_size(size_bytes)
        if app_name in sizes:
            logger.warning(
                "App name collision for %r: %s replaces %s",
                app_name,
                formatted,
                sizes[app_name],
            )
        sizes[app_name] = formatted
    return SnapshotRecord(date=utcnow(), sizes=sizes)
