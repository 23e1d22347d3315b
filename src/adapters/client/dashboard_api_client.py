from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

import httpx
from pydantic import ValidationError

from src.adapters.api.schemas.positions import VehiclePositionSchema
from src.adapters.env import env_float, env_str
from src.adapters.http_client import error_for_response, get_json
from src.app.ports.output import IPositionSource
from src.domain.exceptions import UpstreamOtherError, UpstreamTimeout
from src.domain.models import VehiclePosition

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:8000"


def parse_positions_payload(
    items: Any,
) -> tuple[list[VehiclePosition], list[str]]:
    """Convert the positions JSON array into domain objects.

    Returns (positions, retained_ids): entries that fail validation but still
    carry an id are reported so the renderer keeps their last known state.
    """

    if not isinstance(items, list):
        raise UpstreamOtherError("Positions endpoint did not return a list")

    positions: list[VehiclePosition] = []
    retained: list[str] = []
    for item in items:
        try:
            positions.append(VehiclePositionSchema.model_validate(item).to_domain())
        except ValidationError as exc:
            vehicle_id = item.get("id") if isinstance(item, Mapping) else None
            if vehicle_id not in (None, ""):
                retained.append(str(vehicle_id))
            logger.warning("Ignoring malformed position %r: %s", vehicle_id, exc)
    return positions, retained


@dataclass(slots=True)
class DashboardApiClient(IPositionSource):
    """HTTP client for the dashboard server.

    Env vars:
      - DASHBOARD_API_URL (default http://localhost:8000)
      - DASHBOARD_API_TIMEOUT_S (default 20)
    """

    base_url: str | None = None
    timeout_s: float = 20.0
    transport: httpx.AsyncBaseTransport | None = None

    def __post_init__(self) -> None:
        if self.base_url is None:
            self.base_url = env_str("DASHBOARD_API_URL", DEFAULT_API_URL)
        self.timeout_s = env_float("DASHBOARD_API_TIMEOUT_S", self.timeout_s)

    def _url(self, path: str) -> str:
        return f"{(self.base_url or DEFAULT_API_URL).rstrip('/')}{path}"

    async def get_positions(self) -> list[Mapping[str, Any]]:
        return await get_json(
            self._url("/positions"),
            source="Dashboard positions",
            timeout_s=self.timeout_s,
            transport=self.transport,
        )

    async def get_dispatch_records(self) -> list[Mapping[str, Any]]:
        return await get_json(
            self._url("/dispatch-records"),
            source="Dashboard dispatch records",
            timeout_s=self.timeout_s,
            transport=self.transport,
        )

    async def classify_summary(self, summary: str) -> str:
        source = "Dashboard classifier"
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_s, transport=self.transport
            ) as client:
                resp = await client.post(
                    self._url("/classify-summary"), json={"summary": summary}
                )
        except httpx.TimeoutException as exc:
            raise UpstreamTimeout(f"{source} timed out", details=str(exc)) from exc
        except httpx.HTTPError as exc:
            raise UpstreamOtherError(
                f"{source} request failed", details=str(exc)
            ) from exc

        error = error_for_response(resp, source=source)
        if error is not None:
            raise error
        complaint = resp.json().get("chiefComplaint")
        if not isinstance(complaint, str) or not complaint.strip():
            raise UpstreamOtherError(f"{source} returned no chiefComplaint")
        return complaint.strip()
