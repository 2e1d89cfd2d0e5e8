"""Services package."""

from bundle_analyser.services.bundle_pipeline import BundlePipeline, BundleRunResult
from bundle_analyser.services.snapshot_store import SnapshotStore

__all__ = ["BundlePipeline", "BundleRunResult", "SnapshotStore"]
