from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping

import httpx

from src.adapters.env import env_float, env_str
from src.adapters.http_client import get_json
from src.app.ports.output import IVehiclePositionProvider
from src.domain.exceptions import ConfigurationError

DEFAULT_BASE_URL = "https://fr24api.flightradar24.com"
# north,south,west,east around Indianapolis.
DEFAULT_BOUNDS = "40.10,39.45,-86.55,-85.75"

# Legacy feed rows are positional arrays.
_LEGACY_COLUMNS = {
    "latitude": 1,
    "longitude": 2,
    "heading_degrees": 3,
    "altitude": 4,
    "speed": 5,
    "aircraft_type": 8,
    "registration": 9,
    "observed_at": 10,
    "origin": 11,
    "destination": 12,
    "callsign": 16,
}


def parse_bounds(raw: str) -> tuple[float, float, float, float]:
    """Parse 'north,south,west,east' into floats, validating the box."""

    parts = [p.strip() for p in raw.split(",")]
    if len(parts) != 4:
        raise ConfigurationError(f"FR24_BOUNDS must be north,south,west,east: {raw!r}")
    try:
        north, south, west, east = (float(p) for p in parts)
    except ValueError as exc:
        raise ConfigurationError(f"FR24_BOUNDS is not numeric: {raw!r}") from exc
    if not (-90.0 <= south < north <= 90.0):
        raise ConfigurationError(f"FR24_BOUNDS latitudes out of order: {raw!r}")
    if not (-180.0 <= west <= 180.0 and -180.0 <= east <= 180.0):
        raise ConfigurationError(f"FR24_BOUNDS longitudes out of range: {raw!r}")
    return north, south, west, east


def _first(record: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = record.get(key)
        if value not in (None, ""):
            return value
    return None


def _normalize_record(record: Mapping[str, Any], fallback_id: str | None) -> dict:
    return {
        "id": _first(record, "fr24_id", "id", "hex", "flight") or fallback_id,
        "latitude": _first(record, "lat", "latitude"),
        "longitude": _first(record, "lon", "lng", "longitude"),
        "altitude": _first(record, "alt", "altitude"),
        "heading_degrees": _first(record, "track", "heading"),
        "speed": _first(record, "gspeed", "speed"),
        "callsign": _first(record, "callsign", "flight"),
        "registration": _first(record, "reg", "registration"),
        "aircraft_type": _first(record, "type", "aircraft_type"),
        "origin": _first(record, "orig_iata", "orig_icao", "origin"),
        "destination": _first(record, "dest_iata", "dest_icao", "destination"),
        "observed_at": _first(record, "timestamp", "observed_at"),
    }


def _normalize_legacy_row(vehicle_id: str, row: list[Any]) -> dict:
    out: dict[str, Any] = {"id": vehicle_id}
    for key, index in _LEGACY_COLUMNS.items():
        out[key] = row[index] if index < len(row) and row[index] != "" else None
    return out


def normalize_feed_payload(payload: Any) -> tuple[dict, ...]:
    """Flatten the feed response into records with canonical keys.

    Accepted shapes:
      - {"data": [record, ...]} (current API)
      - [record, ...]
      - {id: record | positional row, ...} (legacy feed; scalar entries such
        as `full_count` and `version` are skipped)
    """

    if isinstance(payload, Mapping) and isinstance(payload.get("data"), list):
        payload = payload["data"]

    out: list[dict] = []
    if isinstance(payload, list):
        for item in payload:
            if isinstance(item, Mapping):
                out.append(_normalize_record(item, fallback_id=None))
        return tuple(out)

    if isinstance(payload, Mapping):
        for key, item in payload.items():
            if isinstance(item, Mapping):
                out.append(_normalize_record(item, fallback_id=str(key)))
            elif isinstance(item, list):
                out.append(_normalize_legacy_row(str(key), item))
    return tuple(out)


@dataclass(slots=True)
class HttpFlightPositionProvider(IVehiclePositionProvider):
    """Fetches live aircraft positions inside a bounding box.

    Env vars:
      - FR24_API_TOKEN: bearer token (required)
      - FR24_BASE_URL: API root (default https://fr24api.flightradar24.com)
      - FR24_BOUNDS: 'north,south,west,east' (default: Indianapolis area)
      - FR24_CATEGORIES: aircraft category filter (default 'H', helicopters;
        empty for all)
      - FR24_TIMEOUT_S: request timeout (default 10)

    Notes:
      - Raw records are returned unvalidated; the position cache filters them.
      - No caching here; callers go through PositionCacheService.
    """

    api_token: str | None = None
    base_url: str | None = None
    bounds_raw: str | None = None
    categories: str | None = None
    timeout_s: float = 10.0
    transport: httpx.AsyncBaseTransport | None = None

    def __post_init__(self) -> None:
        if self.api_token is None:
            self.api_token = env_str("FR24_API_TOKEN")
        if self.base_url is None:
            self.base_url = env_str("FR24_BASE_URL", DEFAULT_BASE_URL)
        if self.bounds_raw is None:
            self.bounds_raw = env_str("FR24_BOUNDS", DEFAULT_BOUNDS)
        if self.categories is None:
            self.categories = os.getenv("FR24_CATEGORIES", "H").strip()
        if os.getenv("FR24_TIMEOUT_S"):
            self.timeout_s = env_float("FR24_TIMEOUT_S", self.timeout_s)

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "Accept-Version": "v1",
            "Authorization": f"Bearer {self.api_token}",
        }

    def _params(self) -> dict[str, str]:
        north, south, west, east = parse_bounds(self.bounds_raw or DEFAULT_BOUNDS)
        params = {"bounds": f"{north:.3f},{south:.3f},{west:.3f},{east:.3f}"}
        if self.categories:
            params["categories"] = self.categories
        return params

    async def fetch_positions(self) -> tuple[dict, ...]:
        if not self.api_token:
            raise ConfigurationError("Missing FR24_API_TOKEN")

        base = (self.base_url or DEFAULT_BASE_URL).rstrip("/")
        url = f"{base}/api/live/flight-positions/full"
        payload = await get_json(
            url,
            source="Flight position feed",
            headers=self._headers(),
            params=self._params(),
            timeout_s=self.timeout_s,
            transport=self.transport,
        )
        return normalize_feed_payload(payload)
