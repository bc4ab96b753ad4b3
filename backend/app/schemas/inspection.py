from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class StationDistance(BaseModel):
    """Catalog entry with its distance from the device (None without GPS)."""
    id: str
    name: str
    lat: float
    lng: float
    distance_km: Optional[float] = None


class StationResolutionResponse(BaseModel):
    detected: Optional[StationDistance] = None
    ranked: List[StationDistance]
    nearby: List[StationDistance]


class UploadResponse(BaseModel):
    """Upload result. Duplicates carry a message instead of a folder id."""
    success: bool
    folderId: Optional[str] = None
    message: Optional[str] = None


class InspectionLogRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: str
    substation_name: str
    timestamp: Optional[datetime] = None
    gps_lat: Optional[float] = None
    gps_lng: Optional[float] = None
    folder_id: Optional[str] = None
    status: str


class DashboardStats(BaseModel):
    total: int = 0
    totalSubmissions: int = 0
    recent: List[InspectionLogRead] = []
    pendingSubstations: List[str] = []
    coveragePercent: int = 0
