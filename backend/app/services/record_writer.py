"""
Inspection record fan-out.

One accepted submission is written to three sinks:

1. Drive evidence folder + photos  - fatal, StorageError reaches the caller
2. inspection_logs row             - best-effort, failure logged
3. Google Sheet summary row        - best-effort, failure logged

Each sink reports an explicit outcome so partial failures are observable.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.bridges.sheets import SheetsBridge
from app.core.config import Settings
from app.core.dates import display_datetime
from app.models.inspection_log import InspectionLog
from app.services.evidence import EvidenceFile, package_evidence
from app.services.upload_service import UploadOrchestrator

logger = logging.getLogger(__name__)

UNKNOWN_EMPLOYEE = "ไม่ระบุ"
SHEET_STATUS = "Completed"
FOLDER_LINK = "https://drive.google.com/drive/folders/{folder_id}"


class SinkOutcome(str, Enum):
    OK = "ok"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class SinkOutcomes:
    storage: SinkOutcome = SinkOutcome.SKIPPED
    database: SinkOutcome = SinkOutcome.SKIPPED
    spreadsheet: SinkOutcome = SinkOutcome.SKIPPED


@dataclass
class InspectionSubmission:
    employee_id: str
    substation_name: str
    lat: Optional[str]
    lng: Optional[str]
    timestamp: datetime
    files: list[EvidenceFile] = field(default_factory=list)


@dataclass
class SubmissionResult:
    folder_id: str
    file_ids: list[str]
    outcomes: SinkOutcomes


def parse_coordinate(value: Optional[str]) -> float:
    try:
        return float(value) if value not in (None, "") else 0.0
    except ValueError:
        return 0.0


def coordinate_text(value: Optional[str]) -> str:
    return value if value not in (None, "") else "0"


class InspectionRecordWriter:
    def __init__(
        self,
        uploader: UploadOrchestrator,
        settings: Settings,
        session_maker: Optional[async_sessionmaker[AsyncSession]] = None,
        sheets: Optional[SheetsBridge] = None,
    ):
        self.uploader = uploader
        self.settings = settings
        self.session_maker = session_maker
        self.sheets = sheets

    async def write(self, submission: InspectionSubmission) -> SubmissionResult:
        outcomes = SinkOutcomes()

        files = submission.files
        if self.settings.EVIDENCE_PACKAGING_ENABLED:
            # Pillow work is CPU bound, keep it off the event loop
            files = [
                await asyncio.to_thread(
                    package_evidence, f, submission.timestamp, self.settings.LOCAL_TIMEZONE, self.settings.DATE_YEAR_ERA
                )
                for f in files
            ]

        # Fatal: let StorageError propagate
        folder_id = await self.uploader.ensure_daily_folder(submission.substation_name, submission.timestamp)
        file_ids = await self.uploader.upload_files(folder_id, files)
        outcomes.storage = SinkOutcome.OK

        outcomes.database = await self._log_to_database(submission, folder_id)
        outcomes.spreadsheet = await self._append_to_sheet(submission, folder_id)

        return SubmissionResult(folder_id=folder_id, file_ids=file_ids, outcomes=outcomes)

    async def _log_to_database(self, submission: InspectionSubmission, folder_id: str) -> SinkOutcome:
        if self.session_maker is None:
            return SinkOutcome.SKIPPED
        try:
            async with self.session_maker() as session:
                session.add(InspectionLog(
                    employee_id=submission.employee_id or UNKNOWN_EMPLOYEE,
                    substation_name=submission.substation_name,
                    timestamp=datetime.now(timezone.utc),
                    gps_lat=parse_coordinate(submission.lat),
                    gps_lng=parse_coordinate(submission.lng),
                    folder_id=folder_id,
                ))
                await session.commit()
        except Exception as e:
            logger.error(f"[DB] Failed to log inspection for {submission.substation_name}: {e}")
            return SinkOutcome.FAILED
        return SinkOutcome.OK

    async def _append_to_sheet(self, submission: InspectionSubmission, folder_id: str) -> SinkOutcome:
        if self.sheets is None:
            return SinkOutcome.SKIPPED
        row = [
            display_datetime(submission.timestamp, self.settings.LOCAL_TIMEZONE),
            submission.employee_id or UNKNOWN_EMPLOYEE,
            submission.substation_name,
            coordinate_text(submission.lat),
            coordinate_text(submission.lng),
            FOLDER_LINK.format(folder_id=folder_id),
            SHEET_STATUS,
        ]
        try:
            await self.sheets.append_row(self.settings.sheet_id, self.settings.GOOGLE_SHEET_RANGE, row)
        except Exception as e:
            logger.error(f"[SHEETS] Failed to append row for {submission.substation_name}: {e}")
            return SinkOutcome.FAILED
        return SinkOutcome.OK
