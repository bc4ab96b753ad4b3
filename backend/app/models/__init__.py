from app.models.inspection_log import InspectionLog

__all__ = [
    "InspectionLog",
]
