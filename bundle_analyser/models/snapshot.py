"""Bundle snapshot model."""

from sqlalchemy import JSON, Column, DateTime, Integer

from bundle_analyser.config import settings
from bundle_analyser.database import Base
from bundle_analyser.utils.clock import utcnow


class BundleSnapshot(Base):
    """One dated measurement of every artifact in the import map.

    ``date`` is naive UTC. ``sizes`` maps app name to a ``"<N.NN> KB"`` string.
    """

    __tablename__ = settings.snapshot_table

    id = Column(Integer, primary_key=True, autoincrement=True)
    date = Column(DateTime, default=utcnow, nullable=False, index=True)
    sizes = Column(JSON, nullable=False, default=dict)

    def __repr__(self) -> str:
        return f"<BundleSnapshot(id={self.id}, date={self.date}, apps={len(self.sizes or {})})>"
