"""Database models package."""

from bundle_analyser.models.snapshot import BundleSnapshot

__all__ = ["BundleSnapshot"]
