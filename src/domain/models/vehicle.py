from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping

from src.domain.exceptions import ValidationError

from .geo import GeoPoint


@dataclass(frozen=True, slots=True)
class VehiclePosition:
    """One tracked aircraft at one point in time."""

    id: str
    latitude: float
    longitude: float
    altitude: float | None = None
    heading_degrees: float | None = None
    speed: float | None = None
    callsign: str | None = None
    registration: str | None = None
    aircraft_type: str | None = None
    origin: str | None = None
    destination: str | None = None
    observed_at: datetime | None = None

    @property
    def point(self) -> GeoPoint:
        return GeoPoint(lat=self.latitude, lon=self.longitude)


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Result of one upstream fetch: positions keyed by id, plus capture time."""

    positions: tuple[VehiclePosition, ...]
    captured_at: datetime
    _by_id: Mapping[str, VehiclePosition] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        by_id: dict[str, VehiclePosition] = {}
        for p in self.positions:
            if p.id in by_id:
                raise ValueError(f"Duplicate vehicle id in snapshot: {p.id}")
            by_id[p.id] = p
        object.__setattr__(self, "_by_id", MappingProxyType(by_id))

    @classmethod
    def from_positions(
        cls,
        positions: Iterable[VehiclePosition],
        *,
        captured_at: datetime | None = None,
    ) -> "Snapshot":
        # Later duplicates overwrite earlier ones but keep the first slot.
        by_id: dict[str, VehiclePosition] = {}
        for p in positions:
            by_id[p.id] = p
        return cls(
            positions=tuple(by_id.values()),
            captured_at=captured_at or datetime.now(timezone.utc),
        )

    @classmethod
    def empty(cls) -> "Snapshot":
        return cls(positions=(), captured_at=datetime.now(timezone.utc))

    @property
    def by_id(self) -> Mapping[str, VehiclePosition]:
        return self._by_id

    @property
    def ids(self) -> frozenset[str]:
        return frozenset(self._by_id)

    def __len__(self) -> int:
        return len(self.positions)

    def __iter__(self) -> Iterator[VehiclePosition]:
        return iter(self.positions)


@dataclass(frozen=True, slots=True)
class CacheEntry:
    snapshot: Snapshot
    fetched_at: float  # monotonic clock reading


def _coerce_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        out = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(out) or math.isinf(out):
        return None
    return out


def _coerce_str(value: Any) -> str | None:
    if value is None:
        return None
    out = str(value).strip()
    return out or None


def _coerce_timestamp(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, str) and value.strip():
        raw = value.strip()
        try:
            parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            parsed = None
        if parsed is not None:
            return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    ts = _coerce_float(value)
    if ts is None or ts <= 0:
        return None
    # Treat values above 1e11 as milliseconds.
    if ts > 1e11:
        ts /= 1000.0
    try:
        return datetime.fromtimestamp(ts, tz=timezone.utc)
    except (ValueError, OverflowError, OSError):
        return None


def parse_vehicle_position(record: Mapping[str, Any]) -> VehiclePosition:
    """Validate one raw record (canonical snake_case keys).

    Raises ValidationError when the id or either coordinate is missing or
    unusable. Optional fields that fail to parse are dropped to None.
    """

    vehicle_id = _coerce_str(record.get("id"))
    if vehicle_id is None:
        raise ValidationError("Record has no id")

    lat = _coerce_float(record.get("latitude"))
    lon = _coerce_float(record.get("longitude"))
    if lat is None or lon is None:
        raise ValidationError(f"Record {vehicle_id} is missing latitude/longitude")
    try:
        GeoPoint(lat=lat, lon=lon)
    except ValueError as exc:
        raise ValidationError(f"Record {vehicle_id}: {exc}") from exc

    return VehiclePosition(
        id=vehicle_id,
        latitude=lat,
        longitude=lon,
        altitude=_coerce_float(record.get("altitude")),
        heading_degrees=_coerce_float(record.get("heading_degrees")),
        speed=_coerce_float(record.get("speed")),
        callsign=_coerce_str(record.get("callsign")),
        registration=_coerce_str(record.get("registration")),
        aircraft_type=_coerce_str(record.get("aircraft_type")),
        origin=_coerce_str(record.get("origin")),
        destination=_coerce_str(record.get("destination")),
        observed_at=_coerce_timestamp(record.get("observed_at")),
    )
