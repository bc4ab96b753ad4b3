"""Dependency injection helpers for FastAPI.

Long-lived services are built once in the application lifespan and kept on
``app.state``; these helpers hand them to request handlers.
"""

from typing import AsyncIterator, Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings
from app.services.dedupe import SubmissionDeduplicator
from app.services.record_writer import InspectionRecordWriter


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


async def get_db(request: Request) -> AsyncIterator[Optional[AsyncSession]]:
    """Yield a session, or None when no database is configured."""
    database = request.app.state.database
    if database is None:
        yield None
        return
    async with database.session_maker() as session:
        yield session


def get_deduplicator(request: Request) -> SubmissionDeduplicator:
    return request.app.state.deduplicator


def get_record_writer(request: Request) -> Optional[InspectionRecordWriter]:
    """None when Google Drive credentials are missing."""
    return request.app.state.record_writer
