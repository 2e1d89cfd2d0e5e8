"""Bundle measurement pipeline.

One run walks these states::

    fetching_manifest -> downloading_artifacts -> aggregating
        -> persisting -> pruning -> cleaning_up -> done

A manifest failure aborts the run before anything touches disk or the store.
Artifact failures only drop that artifact from the snapshot. Prune failures
are logged. The staging area is removed on every exit path once it exists.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path

import httpx

from bundle_analyser.logging_config import get_logger
from bundle_analyser.services.aggregation import SnapshotRecord, aggregate
from bundle_analyser.services.artifacts import Artifact, download_artifact, resolve_artifacts
from bundle_analyser.services.errors import (
    FetchError,
    FilesystemError,
    ParseError,
    StoreError,
)
from bundle_analyser.services.manifest import fetch_import_map
from bundle_analyser.services.snapshot_store import SnapshotStore
from bundle_analyser.utils.staging import staging_area


class PipelineState(str, enum.Enum):
    FETCHING_MANIFEST = "fetching_manifest"
    DOWNLOADING_ARTIFACTS = "downloading_artifacts"
    AGGREGATING = "aggregating"
    PERSISTING = "persisting"
    PRUNING = "pruning"
    CLEANING_UP = "cleaning_up"
    DONE = "done"
    ABORTED = "aborted"


@dataclass(frozen=True)
class ArtifactFailure:
    url: str
    app_name: str
    error: str


@dataclass
class BundleRunResult:
    snapshot: SnapshotRecord
    failures: list[ArtifactFailure] = field(default_factory=list)
    pruned: int | None = None
    state: PipelineState = PipelineState.DONE

    @property
    def partial(self) -> bool:
        return bool(self.failures)


class BundlePipeline:
    """Measures every artifact in an import map and records the snapshot."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        store: SnapshotStore,
        *,
        manifest_url: str | None,
        staging_dir: Path,
        retention_days: int,
    ):
        self._client = client
        self._store = store
        self._manifest_url = manifest_url
        self._staging_dir = Path(staging_dir)
        self._retention_days = retention_days
        self._logger = get_logger(__name__)
        self.state = PipelineState.FETCHING_MANIFEST

    def _enter(self, state: PipelineState) -> None:
        self._logger.debug("Bundle pipeline: %s -> %s", self.state.value, state.value)
        self.state = state

    async def run(self) -> BundleRunResult:
        """Run the pipeline once.

        Raises:
            FetchError: the manifest could not be retrieved
            ParseError: the manifest is malformed
            StoreError: the snapshot could not be saved
        """
        self._enter(PipelineState.FETCHING_MANIFEST)
        try:
            if not self._manifest_url:
                raise FetchError("<unset>", reason="no import map URL configured (IMPORT_MAP)")
            import_map = await fetch_import_map(self._client, self._manifest_url)
        except (FetchError, ParseError):
            self._enter(PipelineState.ABORTED)
            raise

        artifacts = resolve_artifacts(import_map)

        async with staging_area(self._staging_dir) as staging:
            try:
                self._enter(PipelineState.DOWNLOADING_ARTIFACTS)
                measurements, failures = await self._download_all(artifacts, staging)

                self._enter(PipelineState.AGGREGATING)
                snapshot = aggregate(measurements)

                self._enter(PipelineState.PERSISTING)
                await self._store.insert(snapshot)

                self._enter(PipelineState.PRUNING)
                pruned = await self._prune()
            finally:
                self._enter(PipelineState.CLEANING_UP)

        self._enter(PipelineState.DONE)
        if failures:
            self._logger.warning(
                "Bundle run finished with %s of %s artifacts missing",
                len(failures),
                len(artifacts),
            )
        return BundleRunResult(snapshot=snapshot, failures=failures, pruned=pruned, state=self.state)

    async def _download_all(
        self, artifacts: list[Artifact], staging: Path
    ) -> tuple[list[tuple[str, int]], list[ArtifactFailure]]:
        measurements: list[tuple[str, int]] = []
        failures: list[ArtifactFailure] = []
        for artifact in artifacts:
            destination = staging / artifact.file_name
            try:
                size = await download_artifact(self._client, artifact.url, destination)
            except (FetchError, FilesystemError) as exc:
                self._logger.error("Error downloading script %s: %s", artifact.url, exc)
                failures.append(ArtifactFailure(url=artifact.url, app_name=artifact.app_name, error=str(exc)))
                continue
            measurements.append((artifact.app_name, size))
        return measurements, failures

    async def _prune(self) -> int | None:
        try:
            return await self._store.prune(self._retention_days)
        except StoreError as exc:
            self._logger.error("Error cleaning old entries: %s", exc)
            return None
