"""
Evidence folder resolution and upload.

Folder layout under the configured parent:

    <parent>/<substation>/<substation>_<DDMMYY>/<photos>

Each level is find-or-create by exact name. This is read-then-write against
Drive with no compare-and-swap, so two concurrent first submissions for a new
substation/day can both create the folder. Sequential calls always reuse the
existing folder.
"""

import logging
from datetime import datetime
from typing import Iterable

from app.bridges.drive import DriveBridge
from app.core.dates import ddmmyy
from app.services.evidence import EvidenceFile

logger = logging.getLogger(__name__)


class UploadOrchestrator:
    def __init__(
        self,
        drive: DriveBridge,
        parent_folder_id: str,
        tz_name: str = "Asia/Bangkok",
        era: str = "gregorian",
    ):
        self.drive = drive
        self.parent_folder_id = parent_folder_id
        self.tz_name = tz_name
        self.era = era

    def daily_folder_name(self, substation_name: str, when: datetime) -> str:
        return f"{substation_name}_{ddmmyy(when, self.tz_name, self.era)}"

    async def resolve_folder(self, name: str, parent_id: str) -> str:
        folder_id = await self.drive.find_folder(name, parent_id)
        if folder_id:
            return folder_id
        return await self.drive.create_folder(name, parent_id)

    async def ensure_daily_folder(self, substation_name: str, when: datetime) -> str:
        """Resolve substation folder, then the daily folder inside it."""
        station_folder = await self.resolve_folder(substation_name, self.parent_folder_id)
        return await self.resolve_folder(self.daily_folder_name(substation_name, when), station_folder)

    async def upload_files(self, folder_id: str, files: Iterable[EvidenceFile]) -> list[str]:
        """Upload in order. A failure propagates; earlier uploads stay in place."""
        file_ids = []
        for f in files:
            file_ids.append(
                await self.drive.upload_file(folder_id, f.filename, f.content_type, f.content)
            )
        logger.info(f"[DRIVE] Uploaded {len(file_ids)} file(s) to {folder_id}")
        return file_ids
