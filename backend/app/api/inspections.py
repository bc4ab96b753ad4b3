"""
SSVI - Inspection intake API

Substation lookup by GPS and monthly inspection submission.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import JSONResponse

from app.core.config import Settings
from app.core.dates import parse_client_timestamp
from app.dependencies import get_app_settings, get_deduplicator, get_record_writer
from app.schemas.inspection import StationDistance, StationResolutionResponse, UploadResponse
from app.services.dedupe import SubmissionDeduplicator
from app.services.evidence import EvidenceFile
from app.services.geo import RankedStation, resolve_stations
from app.services.record_writer import InspectionRecordWriter, InspectionSubmission

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["inspections"])

DUPLICATE_MESSAGE = "Duplicate request ignored"


def _station_out(ranked: RankedStation) -> StationDistance:
    s = ranked.station
    return StationDistance(id=s.id, name=s.name, lat=s.lat, lng=s.lng, distance_km=ranked.distance_km)


@router.get("/substations", response_model=StationResolutionResponse)
async def list_substations(
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
):
    """Catalog ranked by distance from the device; original order without GPS."""
    resolution = resolve_stations(lat, lng)
    return StationResolutionResponse(
        detected=_station_out(resolution.detected) if resolution.detected else None,
        ranked=[_station_out(r) for r in resolution.ranked],
        nearby=[_station_out(r) for r in resolution.nearby],
    )


@router.post("/upload-inspection", response_model=UploadResponse, response_model_exclude_none=True)
async def upload_inspection(
    substationName: str = Form(...),
    employeeId: str = Form(""),
    lat: Optional[str] = Form(None),
    lng: Optional[str] = Form(None),
    timestamp: Optional[str] = Form(None),
    photos: Optional[List[UploadFile]] = File(None),
    writer: Optional[InspectionRecordWriter] = Depends(get_record_writer),
    deduplicator: SubmissionDeduplicator = Depends(get_deduplicator),
    settings: Settings = Depends(get_app_settings),
):
    """
    Submit a monthly inspection.

    Evidence goes to Drive (fatal on failure); the inspection log row and the
    sheet row are best-effort. A repeat from the same worker for the same
    substation within the debounce window is acknowledged without writing.
    """
    if writer is None:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Google Drive service not configured"},
        )

    employee_id = employeeId.strip()
    if not deduplicator.should_accept(employee_id, substationName):
        return UploadResponse(success=True, message=DUPLICATE_MESSAGE)

    try:
        files = []
        for i, photo in enumerate(photos or [], start=1):
            files.append(EvidenceFile(
                filename=photo.filename or f"photo_{i}.jpg",
                content_type=photo.content_type or "application/octet-stream",
                content=await photo.read(),
            ))

        submission = InspectionSubmission(
            employee_id=employee_id,
            substation_name=substationName,
            lat=lat,
            lng=lng,
            timestamp=parse_client_timestamp(timestamp),
            files=files,
        )
        result = await writer.write(submission)
    except Exception:
        # Nothing was stored, so an immediate retry must go through
        deduplicator.forget(employee_id, substationName)
        raise

    logger.info(
        f"Inspection accepted: {substationName} by {employee_id or '-'} "
        f"folder={result.folder_id} files={len(result.file_ids)} "
        f"db={result.outcomes.database.value} sheet={result.outcomes.spreadsheet.value}"
    )
    return UploadResponse(success=True, folderId=result.folder_id)
