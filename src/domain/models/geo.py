from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """A WGS84 coordinate in degrees."""

    lat: float
    lon: float

    def __post_init__(self) -> None:
        if math.isnan(self.lat) or not (-90.0 <= self.lat <= 90.0):
            raise ValueError(f"Invalid latitude: {self.lat}")
        if math.isnan(self.lon) or not (-180.0 <= self.lon <= 180.0):
            raise ValueError(f"Invalid longitude: {self.lon}")

    def as_lonlat(self) -> tuple[float, float]:
        # GeoJSON order.
        return (self.lon, self.lat)

    def displacement_deg(self, other: GeoPoint) -> float:
        """Largest per-axis difference to `other`, in degrees."""

        return max(abs(other.lat - self.lat), abs(other.lon - self.lon))
