from .chief_complaint_classifier import IChiefComplaintClassifier
from .dispatch_record_repository import IDispatchRecordRepository
from .position_source import IPositionSource
from .vehicle_position_provider import IVehiclePositionProvider

__all__ = [
    "IChiefComplaintClassifier",
    "IDispatchRecordRepository",
    "IPositionSource",
    "IVehiclePositionProvider",
]
