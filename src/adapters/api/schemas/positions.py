from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.domain.models import VehiclePosition


class VehiclePositionSchema(BaseModel):
    """Wire shape of one vehicle, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(..., min_length=1)
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)
    altitude: float | None = None
    heading_degrees: float | None = None
    speed: float | None = None
    callsign: str | None = None
    registration: str | None = None
    aircraft_type: str | None = None
    origin: str | None = None
    destination: str | None = None
    observed_at: datetime | None = None

    @classmethod
    def from_domain(cls, p: VehiclePosition) -> "VehiclePositionSchema":
        return cls(
            id=p.id,
            latitude=p.latitude,
            longitude=p.longitude,
            altitude=p.altitude,
            heading_degrees=p.heading_degrees,
            speed=p.speed,
            callsign=p.callsign,
            registration=p.registration,
            aircraft_type=p.aircraft_type,
            origin=p.origin,
            destination=p.destination,
            observed_at=p.observed_at,
        )

    def to_domain(self) -> VehiclePosition:
        return VehiclePosition(
            id=self.id,
            latitude=self.latitude,
            longitude=self.longitude,
            altitude=self.altitude,
            heading_degrees=self.heading_degrees,
            speed=self.speed,
            callsign=self.callsign,
            registration=self.registration,
            aircraft_type=self.aircraft_type,
            origin=self.origin,
            destination=self.destination,
            observed_at=self.observed_at,
        )


class ErrorSchema(BaseModel):
    error: str
    details: str | None = None
