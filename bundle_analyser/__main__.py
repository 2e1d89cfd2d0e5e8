"""
Command line entry point.

Usage:
  python -m bundle_analyser serve [--host HOST] [--port PORT]
  python -m bundle_analyser measure
  python -m bundle_analyser migrate
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from bundle_analyser.config import settings


async def measure() -> int:
    import httpx

    from bundle_analyser.database import AsyncSessionLocal, engine
    from bundle_analyser.migrations_utils import initialize_database
    from bundle_analyser.services.bundle_pipeline import BundlePipeline
    from bundle_analyser.services.errors import FetchError, ParseError, StoreError
    from bundle_analyser.services.snapshot_store import SnapshotStore

    try:
        await initialize_database(engine)
        async with httpx.AsyncClient(
            timeout=settings.http_timeout_seconds, follow_redirects=True
        ) as client:
            pipeline = BundlePipeline(
                client,
                SnapshotStore(AsyncSessionLocal),
                manifest_url=settings.import_map_url,
                staging_dir=Path(settings.staging_dir),
                retention_days=settings.retention_days,
            )
            try:
                result = await pipeline.run()
            except (FetchError, ParseError, StoreError) as exc:
                print(f"Error generating bundle: {exc}", file=sys.stderr)
                return 1
    finally:
        await engine.dispose()

    payload = result.snapshot.to_document()
    payload["failed"] = [failure.url for failure in result.failures]
    print(json.dumps(payload, indent=2))
    return 0


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="bundle_analyser",
        description="Measure import-map bundle sizes and serve their history.",
    )
    sub = parser.add_subparsers(dest="command")

    serve = sub.add_parser("serve", help="Run the HTTP server (default)")
    serve.add_argument("--host", default=settings.host, help=f"Bind address (default: {settings.host})")
    serve.add_argument("--port", type=int, default=settings.port, help=f"Port (default: {settings.port})")

    sub.add_parser("measure", help="Run one measurement and print the snapshot")
    sub.add_parser("migrate", help="Apply database migrations")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    command = args.command or "serve"

    from bundle_analyser.logging_config import setup_logging

    if command == "measure":
        setup_logging()
        return asyncio.run(measure())

    if command == "migrate":
        from bundle_analyser.migrations_utils import upgrade_database

        setup_logging()
        upgrade_database()
        return 0

    import uvicorn

    host = getattr(args, "host", settings.host)
    port = getattr(args, "port", settings.port)
    uvicorn.run("bundle_analyser.main:app", host=host, port=port, log_config=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())
