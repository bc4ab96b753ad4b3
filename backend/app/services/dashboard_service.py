"""Dashboard queries over inspection_logs plus catalog coverage."""

import logging
from datetime import datetime, timezone
from typing import Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dates import month_window, to_local
from app.core.substations import SUBSTATIONS, Substation
from app.models.inspection_log import InspectionLog
from app.schemas.inspection import DashboardStats, InspectionLogRead

logger = logging.getLogger(__name__)

RECENT_LIMIT = 100


def summarize_coverage(
    recent: Sequence[InspectionLogRead],
    catalog: Sequence[Substation] = SUBSTATIONS,
) -> tuple[list[str], int]:
    """Catalog stations missing from ``recent`` and the inspected percentage."""
    inspected = {row.substation_name for row in recent}
    pending = [s.name for s in catalog if s.name not in inspected]
    if not catalog:
        return pending, 0
    covered = len(catalog) - len(pending)
    return pending, round(covered / len(catalog) * 100)


def empty_stats(catalog: Sequence[Substation] = SUBSTATIONS) -> DashboardStats:
    return DashboardStats(pendingSubstations=[s.name for s in catalog])


class DashboardService:
    def __init__(self, db: AsyncSession, tz_name: str = "Asia/Bangkok"):
        self.db = db
        self.tz_name = tz_name

    def _window(self, month: Optional[int], year: Optional[int]) -> Optional[tuple[datetime, datetime]]:
        if month is None and year is None:
            return None
        if year is None:
            year = to_local(datetime.now(timezone.utc), self.tz_name).year
        return month_window(year, month, self.tz_name)

    async def get_stats(self, month: Optional[int] = None, year: Optional[int] = None) -> DashboardStats:
        counts_stmt = select(
            func.count(func.distinct(InspectionLog.substation_name)),
            func.count(InspectionLog.id),
        )
        recent_stmt = select(InspectionLog)

        window = self._window(month, year)
        if window is not None:
            start, end = window
            in_window = (InspectionLog.timestamp >= start, InspectionLog.timestamp < end)
            counts_stmt = counts_stmt.where(*in_window)
            recent_stmt = recent_stmt.where(*in_window)

        total, total_submissions = (await self.db.execute(counts_stmt)).one()

        result = await self.db.execute(
            recent_stmt
            .order_by(InspectionLog.timestamp.desc(), InspectionLog.id.desc())
            .limit(RECENT_LIMIT)
        )
        recent = [InspectionLogRead.model_validate(row) for row in result.scalars().all()]

        pending, coverage = summarize_coverage(recent)
        return DashboardStats(
            total=total or 0,
            totalSubmissions=total_submissions or 0,
            recent=recent,
            pendingSubstations=pending,
            coveragePercent=coverage,
        )
