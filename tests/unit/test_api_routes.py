from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import httpx
import pytest

from src.adapters.api.dependencies import (
    get_dispatch_service,
    get_position_cache_service,
)
from src.app.services.dispatch_service import DispatchService
from src.domain.exceptions import (
    ConfigurationError,
    UpstreamAuthError,
    UpstreamOtherError,
    UpstreamRateLimited,
    UpstreamTimeout,
)
from src.domain.models import DispatchRecord, Snapshot, VehiclePosition
from src.main import app

CAPTURED_AT = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class _FakeCacheService:
    def __init__(self, result: Snapshot | Exception) -> None:
        self._result = result

    async def get_positions(self) -> Snapshot:
        if isinstance(self._result, Exception):
            raise self._result
        return self._result


class _FakeRepository:
    async def list_recent(self) -> tuple[DispatchRecord, ...]:
        raw = {
            "id": 3,
            "timestamp": "2026-03-01T11:59:00Z",
            "conversation_analysis": {"summary": "Chest pain"},
            "notes": "second floor",
        }
        return (DispatchRecord(id=3, summary="Chest pain", fields=raw),)


async def _request(method: str, path: str, **kwargs: Any) -> httpx.Response:
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        return await client.request(method, path, **kwargs)


@pytest.mark.unit
@pytest.mark.anyio
async def test_get_positions_returns_camel_case_and_omits_missing_fields() -> None:
    snapshot = Snapshot(
        positions=(
            VehiclePosition(
                id="3a1b2c",
                latitude=39.77,
                longitude=-86.16,
                heading_degrees=270.0,
                aircraft_type="EC35",
            ),
        ),
        captured_at=CAPTURED_AT,
    )
    app.dependency_overrides[get_position_cache_service] = lambda: _FakeCacheService(
        snapshot
    )

    resp = await _request("GET", "/positions")

    app.dependency_overrides.clear()

    assert resp.status_code == 200
    assert resp.headers["X-Captured-At"] == CAPTURED_AT.isoformat()
    assert resp.json() == [
        {
            "id": "3a1b2c",
            "latitude": 39.77,
            "longitude": -86.16,
            "headingDegrees": 270.0,
            "aircraftType": "EC35",
        }
    ]


@pytest.mark.unit
@pytest.mark.anyio
@pytest.mark.parametrize(
    "error,status",
    [
        (UpstreamAuthError("Flight position feed rejected the credential"), 401),
        (UpstreamRateLimited("Flight position feed rate limit exceeded"), 429),
        (UpstreamTimeout("Flight position feed timed out"), 504),
        (UpstreamOtherError("Flight position feed returned HTTP 502"), 500),
        (UpstreamOtherError("Table not found", status_code=404), 404),
        (ConfigurationError("Missing FR24_API_TOKEN"), 500),
    ],
)
async def test_positions_errors_map_to_status_codes(
    error: Exception, status: int
) -> None:
    app.dependency_overrides[get_position_cache_service] = lambda: _FakeCacheService(
        error
    )

    resp = await _request("GET", "/positions")

    app.dependency_overrides.clear()

    assert resp.status_code == status
    assert resp.json()["error"] == str(error)


@pytest.mark.unit
@pytest.mark.anyio
async def test_upstream_details_are_included_in_error_body() -> None:
    error = UpstreamRateLimited("rate limit exceeded", details="try later")
    app.dependency_overrides[get_position_cache_service] = lambda: _FakeCacheService(
        error
    )

    resp = await _request("GET", "/positions")

    app.dependency_overrides.clear()

    assert resp.json() == {"error": "rate limit exceeded", "details": "try later"}


@pytest.mark.unit
@pytest.mark.anyio
async def test_unhandled_error_is_json_500() -> None:
    app.dependency_overrides[get_position_cache_service] = lambda: _FakeCacheService(
        RuntimeError("boom")
    )

    resp = await _request("GET", "/positions")

    app.dependency_overrides.clear()

    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal Server Error", "details": "boom"}


@pytest.mark.unit
@pytest.mark.anyio
async def test_dispatch_records_are_passed_through() -> None:
    app.dependency_overrides[get_dispatch_service] = lambda: DispatchService(
        repository=_FakeRepository()
    )

    resp = await _request("GET", "/dispatch-records")

    app.dependency_overrides.clear()

    assert resp.status_code == 200
    payload = resp.json()
    assert payload[0]["id"] == 3
    assert payload[0]["notes"] == "second floor"
    assert payload[0]["conversation_analysis"]["summary"] == "Chest pain"


@pytest.mark.unit
@pytest.mark.anyio
async def test_dispatch_records_without_store_is_configuration_error() -> None:
    app.dependency_overrides[get_dispatch_service] = lambda: DispatchService()

    resp = await _request("GET", "/dispatch-records")

    app.dependency_overrides.clear()

    assert resp.status_code == 500
    assert "not configured" in resp.json()["error"]


@pytest.mark.unit
@pytest.mark.anyio
@pytest.mark.parametrize(
    "body,expected",
    [
        ({"summary": "Caller reports chest pain"}, "Chest Pain"),
        ({"summary": ""}, "Emergency Call"),
        ({}, "Emergency Call"),
    ],
)
async def test_classify_summary_falls_back_without_classifier(
    body: dict[str, Any], expected: str
) -> None:
    app.dependency_overrides[get_dispatch_service] = lambda: DispatchService()

    resp = await _request("POST", "/classify-summary", json=body)

    app.dependency_overrides.clear()

    assert resp.status_code == 200
    assert resp.json() == {"chiefComplaint": expected}


@pytest.mark.unit
@pytest.mark.anyio
async def test_health() -> None:
    resp = await _request("GET", "/health")
    assert resp.json() == {"status": "ok"}
