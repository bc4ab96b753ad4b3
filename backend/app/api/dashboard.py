"""SSVI - Executive dashboard API."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings
from app.dependencies import get_app_settings, get_db
from app.schemas.inspection import DashboardStats
from app.services.dashboard_service import DashboardService, empty_stats

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["dashboard"])


@router.get("/dashboard-stats", response_model=DashboardStats)
async def dashboard_stats(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=1),
    db: Optional[AsyncSession] = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    """Inspected-station count, submission count and the latest 100 logs."""
    if db is None:
        return empty_stats()

    try:
        return await DashboardService(db, settings.LOCAL_TIMEZONE).get_stats(month=month, year=year)
    except SQLAlchemyError as e:
        logger.error(f"[DB] Dashboard query failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to fetch stats"},
        )
