from app.schemas.inspection import (
    DashboardStats,
    InspectionLogRead,
    StationDistance,
    StationResolutionResponse,
    UploadResponse,
)

__all__ = [
    "DashboardStats",
    "InspectionLogRead",
    "StationDistance",
    "StationResolutionResponse",
    "UploadResponse",
]
