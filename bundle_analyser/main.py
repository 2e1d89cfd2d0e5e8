"""FastAPI application."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, PlainTextResponse
from sqlalchemy import text

from bundle_analyser import __version__
from bundle_analyser.config import settings
from bundle_analyser.database import engine
from bundle_analyser.logging_config import setup_logging
from bundle_analyser.migrations_utils import check_migration_status, initialize_database
from bundle_analyser.routes import bundle as bundle_module

# Initialize logging
setup_logging()
logger = logging.getLogger("bundle_analyser.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown."""
    # Startup
    logger.info("Starting bundle analyser")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Import map: {settings.import_map_url or '(not configured)'}")
    logger.info(f"Retention: {settings.retention_days} days")

    await initialize_database(engine)
    current_rev, head_rev = await check_migration_status(engine)
    logger.info(f"Database migration status: {current_rev} (head: {head_rev})")

    yield

    # Shutdown
    logger.info("Shutting down bundle analyser")
    await engine.dispose()


app = FastAPI(
    title="Bundle Analyser",
    description="Tracks the size of import-map script bundles over time",
    version=__version__,
    lifespan=lifespan,
)


@app.middleware("http")
async def catch_unhandled_errors(request, call_next):
    try:
        return await call_next(request)
    except HTTPException:
        raise
    except Exception:  # noqa: B902
        # Preserve stack in server logs while still answering the client
        logger.exception("Request failed: %s %s", request.method, request.url)
        return PlainTextResponse("Internal Server Error", status_code=500)


origins = settings.cors_origins_list
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials="*" not in origins,
    allow_methods=["GET"],
    allow_headers=["*"],
)

app.include_router(bundle_module.router)


@app.get("/health")
async def health_check():
    """Health check endpoint with store status."""
    db_status = "unknown"
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        db_status = "healthy"
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        db_status = "unhealthy"

    return {
        "status": "healthy" if db_status == "healthy" else "degraded",
        "version": __version__,
        "environment": settings.environment,
        "database": db_status,
    }


# Built front end, when present. Registered last so API routes win.
STATIC_DIR = Path(settings.static_dir).resolve()
if STATIC_DIR.is_dir():

    @app.get("/{full_path:path}", include_in_schema=False)
    async def serve_frontend(full_path: str):
        candidate = (STATIC_DIR / full_path).resolve()
        if full_path and candidate.is_file() and candidate.is_relative_to(STATIC_DIR):
            return FileResponse(candidate)
        index = STATIC_DIR / "index.html"
        if not index.is_file():
            raise HTTPException(status_code=404, detail="Not Found")
        return FileResponse(index)
