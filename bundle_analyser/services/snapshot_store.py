"""Durable snapshot storage with time-based retention."""

from __future__ import annotations

from datetime import datetime, timedelta

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from bundle_analyser.logging_config import get_logger
from bundle_analyser.models.snapshot import BundleSnapshot
from bundle_analyser.services.aggregation import SnapshotRecord
from bundle_analyser.services.errors import StoreError
from bundle_analyser.utils.clock import utcnow

logger = get_logger(__name__)


class SnapshotStore:
    """Insert, prune and list snapshots.

    Every method opens its own session from ``session_factory`` and closes it
    before returning, so operations never share a connection.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def insert(self, snapshot: SnapshotRecord) -> None:
        try:
            async with self._session_factory() as session:
                session.add(BundleSnapshot(date=snapshot.date, sizes=dict(snapshot.sizes)))
                await session.commit()
        except SQLAlchemyError as exc:
            raise StoreError(f"Error saving bundle sizes: {exc}") from exc
        logger.info("Bundle sizes saved (%s apps)", len(snapshot.sizes))

    async def prune(self, retention_days: int, *, now: datetime | None = None) -> int:
        """Delete snapshots dated strictly before ``now - retention_days``.

        Returns the number of deleted snapshots. A window reaching back past
        ``datetime.min`` keeps everything.
        """
        try:
            cutoff = (now or utcnow()) - timedelta(days=retention_days)
        except OverflowError:
            logger.info("Retention of %s days reaches past the earliest date; nothing to delete", retention_days)
            return 0
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    delete(BundleSnapshot).where(BundleSnapshot.date < cutoff)
                )
                await session.commit()
        except SQLAlchemyError as exc:
            raise StoreError(f"Error cleaning old entries: {exc}") from exc
        deleted = result.rowcount or 0
        logger.info("Deleted %s entries older than %s days", deleted, retention_days)
        return deleted

    async def query_all(self) -> list[SnapshotRecord]:
        """Return every snapshot, most recent first."""
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(BundleSnapshot).order_by(BundleSnapshot.date.desc(), BundleSnapshot.id.desc())
                )
                rows = result.scalars().all()
        except SQLAlchemyError as exc:
            raise StoreError(f"Error reading bundle sizes: {exc}") from exc
        return [SnapshotRecord(date=row.date, sizes=dict(row.sizes or {})) for row in rows]
