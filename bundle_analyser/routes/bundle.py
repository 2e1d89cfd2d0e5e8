"""Bundle measurement and history routes."""

import logging
from pathlib import Path
from typing import Annotated, AsyncIterator

import httpx
from fastapi import APIRouter, Depends, HTTPException, status

from bundle_analyser.config import settings
from bundle_analyser.database import AsyncSessionLocal
from bundle_analyser.schemas.snapshot import (
    ArtifactFailureResponse,
    BundleRunResponse,
    SnapshotResponse,
)
from bundle_analyser.services.bundle_pipeline import BundlePipeline
from bundle_analyser.services.errors import StoreError
from bundle_analyser.services.snapshot_store import SnapshotStore

logger = logging.getLogger("bundle_analyser.routes.bundle")

router = APIRouter(tags=["bundle"])


def get_snapshot_store() -> SnapshotStore:
    return SnapshotStore(AsyncSessionLocal)


async def get_http_client() -> AsyncIterator[httpx.AsyncClient]:
    """HTTP client for one pipeline run; every request is bounded by the configured timeout."""
    async with httpx.AsyncClient(
        timeout=settings.http_timeout_seconds, follow_redirects=True
    ) as client:
        yield client


@router.get("/bundle", response_model=BundleRunResponse)
async def generate_bundle(
    store: Annotated[SnapshotStore, Depends(get_snapshot_store)],
    client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
):
    """Measure every artifact in the import map and save the snapshot."""
    pipeline = BundlePipeline(
        client,
        store,
        manifest_url=settings.import_map_url,
        staging_dir=Path(settings.staging_dir),
        retention_days=settings.retention_days,
    )
    try:
        result = await pipeline.run()
    except Exception as exc:
        logger.exception("Bundle run failed in state %s", pipeline.state.value)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error generating bundle: {exc}",
        )

    return BundleRunResponse(
        date=result.snapshot.date,
        sizes=result.snapshot.sizes,
        failed=[
            ArtifactFailureResponse(url=f.url, app_name=f.app_name, error=f.error)
            for f in result.failures
        ],
        partial=result.partial,
    )


@router.get("/analyser", response_model=list[SnapshotResponse])
async def list_snapshots(store: Annotated[SnapshotStore, Depends(get_snapshot_store)]):
    """Return every stored snapshot, most recent first."""
    try:
        records = await store.query_all()
    except StoreError as exc:
        logger.error("Failed to read snapshots: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error reading bundle sizes: {exc}",
        )
    return [SnapshotResponse(date=r.date, sizes=r.sizes) for r in records]
