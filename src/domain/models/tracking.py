from __future__ import annotations

from dataclasses import dataclass, field

from src.domain.algorithms.easing import ease_out_cubic, lerp

from .geo import GeoPoint
from .vehicle import VehiclePosition


@dataclass(frozen=True, slots=True)
class TrailPoint:
    position: GeoPoint
    captured_at: float  # client monotonic clock, seconds


@dataclass(slots=True)
class Trail:
    """Recent positions of one vehicle, oldest first."""

    points: list[TrailPoint] = field(default_factory=list)

    @property
    def last(self) -> TrailPoint | None:
        return self.points[-1] if self.points else None

    def __len__(self) -> int:
        return len(self.points)


@dataclass(frozen=True, slots=True)
class MarkerAnimation:
    """Eased move of a marker from `start` to `target`.

    Recreated on every new target, so a later update simply replaces it.
    """

    start: GeoPoint
    target: GeoPoint
    started_at: float
    duration_s: float

    def progress(self, now: float) -> float:
        if self.duration_s <= 0:
            return 1.0
        t = (now - self.started_at) / self.duration_s
        return max(0.0, min(1.0, t))

    def done(self, now: float) -> bool:
        return self.progress(now) >= 1.0

    def position_at(self, now: float) -> GeoPoint:
        t = self.progress(now)
        if t >= 1.0:
            return self.target
        eased = ease_out_cubic(t)
        # Latitude and longitude are interpolated independently.
        return GeoPoint(
            lat=lerp(self.start.lat, self.target.lat, eased),
            lon=lerp(self.start.lon, self.target.lon, eased),
        )


@dataclass(slots=True)
class DisplayedMarker:
    vehicle_id: str
    position: GeoPoint
    target: GeoPoint
    vehicle: VehiclePosition
    heading_degrees: float | None = None
    animation: MarkerAnimation | None = None

    @property
    def animating(self) -> bool:
        return self.animation is not None


@dataclass(frozen=True, slots=True)
class TrailSegment:
    vehicle_id: str
    start: GeoPoint
    end: GeoPoint
    opacity: float
    weight: float
    glow: bool = False


@dataclass(frozen=True, slots=True)
class RenderFrame:
    markers: tuple[DisplayedMarker, ...]
    segments: tuple[TrailSegment, ...]
    rendered_at: float
