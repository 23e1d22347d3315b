from .dispatch import DispatchRecord
from .geo import GeoPoint
from .tracking import (
    DisplayedMarker,
    MarkerAnimation,
    RenderFrame,
    Trail,
    TrailPoint,
    TrailSegment,
)
from .vehicle import CacheEntry, Snapshot, VehiclePosition, parse_vehicle_position

__all__ = [
    "CacheEntry",
    "DispatchRecord",
    "DisplayedMarker",
    "GeoPoint",
    "MarkerAnimation",
    "RenderFrame",
    "Snapshot",
    "Trail",
    "TrailPoint",
    "TrailSegment",
    "VehiclePosition",
    "parse_vehicle_position",
]
