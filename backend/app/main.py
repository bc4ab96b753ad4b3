"""SSVI - FastAPI Application.

Smart Substation Visual Inspection: monthly field inspection intake.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api import dashboard, inspections
from app.bridges.drive import DriveBridge, StorageError
from app.bridges.google_auth import build_token_provider
from app.bridges.sheets import SheetsBridge
from app.core.config import Settings, get_settings
from app.core.database import Database
from app.services.dedupe import SubmissionDeduplicator
from app.services.record_writer import InspectionRecordWriter
from app.services.upload_service import UploadOrchestrator

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        http = httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS)

        database = None
        url = settings.async_database_url
        if url:
            try:
                database = Database(url)
                await database.create_tables()
            except Exception as e:
                logger.error(f"[DB] Failed to connect to database: {e}")
                if database is not None:
                    await database.dispose()
                database = None
        else:
            logger.warning("[DB] DATABASE_URL not found. Database features will be disabled.")

        record_writer = None
        tokens = build_token_provider(settings)
        if tokens is not None:
            record_writer = InspectionRecordWriter(
                uploader=UploadOrchestrator(
                    DriveBridge(http, tokens),
                    parent_folder_id=settings.parent_folder_id,
                    tz_name=settings.LOCAL_TIMEZONE,
                    era=settings.DATE_YEAR_ERA,
                ),
                settings=settings,
                session_maker=database.session_maker if database else None,
                sheets=SheetsBridge(http, tokens),
            )

        app.state.settings = settings
        app.state.database = database
        app.state.record_writer = record_writer
        app.state.deduplicator = SubmissionDeduplicator(
            window_ms=settings.DEDUPE_WINDOW_MS,
            max_entries=settings.DEDUPE_MAX_ENTRIES,
        )
        try:
            yield
        finally:
            await http.aclose()
            if database is not None:
                await database.dispose()

    app = FastAPI(
        title=settings.APP_NAME,
        description="Smart Substation Visual Inspection - field inspection intake",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        logger.error(f"[DRIVE] Upload error: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": str(exc)},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )

    app.include_router(inspections.router)
    app.include_router(dashboard.router)

    @app.get("/api/health")
    async def health():
        """Liveness probe."""
        return {"status": "ok"}

    return app


configure_logging(get_settings().LOG_LEVEL)
app = create_app()
