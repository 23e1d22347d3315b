from __future__ import annotations

import asyncio

import httpx
import pytest

from src.adapters.realtime.http_flight_position_provider import (
    HttpFlightPositionProvider,
    normalize_feed_payload,
    parse_bounds,
)
from src.domain.exceptions import (
    ConfigurationError,
    UpstreamAuthError,
    UpstreamOtherError,
    UpstreamRateLimited,
    UpstreamTimeout,
)


def _provider(handler, **kwargs) -> HttpFlightPositionProvider:
    kwargs.setdefault("api_token", "secret")
    kwargs.setdefault("base_url", "https://fr24.test")
    kwargs.setdefault("bounds_raw", "40.1,39.45,-86.55,-85.75")
    kwargs.setdefault("categories", "H")
    return HttpFlightPositionProvider(
        transport=httpx.MockTransport(handler), **kwargs
    )


def test_fetch_sends_token_bounds_and_normalizes_records() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "data": [
                    {
                        "fr24_id": "3a1b2c",
                        "lat": 39.77,
                        "lon": -86.16,
                        "track": 270,
                        "alt": 1200,
                        "gspeed": 110,
                        "callsign": "LIFE1",
                        "reg": "N911LL",
                        "type": "EC35",
                        "timestamp": "2026-01-01T12:00:00Z",
                    }
                ]
            },
        )

    records = asyncio.run(_provider(handler).fetch_positions())

    request = seen[0]
    assert request.url.path == "/api/live/flight-positions/full"
    assert request.headers["Authorization"] == "Bearer secret"
    assert request.headers["Accept-Version"] == "v1"
    assert request.url.params["bounds"] == "40.100,39.450,-86.550,-85.750"
    assert request.url.params["categories"] == "H"

    assert records == (
        {
            "id": "3a1b2c",
            "latitude": 39.77,
            "longitude": -86.16,
            "altitude": 1200,
            "heading_degrees": 270,
            "speed": 110,
            "callsign": "LIFE1",
            "registration": "N911LL",
            "aircraft_type": "EC35",
            "origin": None,
            "destination": None,
            "observed_at": "2026-01-01T12:00:00Z",
        },
    )


def test_empty_categories_are_not_sent() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"data": []})

    assert asyncio.run(_provider(handler, categories="").fetch_positions()) == ()
    assert "categories" not in seen[0].url.params


def test_missing_token_is_configuration_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    with pytest.raises(ConfigurationError):
        asyncio.run(_provider(handler, api_token="").fetch_positions())


@pytest.mark.parametrize(
    "status,error_type",
    [
        (401, UpstreamAuthError),
        (403, UpstreamAuthError),
        (429, UpstreamRateLimited),
        (504, UpstreamTimeout),
        (500, UpstreamOtherError),
        (502, UpstreamOtherError),
    ],
)
def test_upstream_status_maps_to_error(status: int, error_type: type) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status, text="nope")

    with pytest.raises(error_type) as info:
        asyncio.run(_provider(handler).fetch_positions())

    assert info.value.details == "nope"
    if error_type is UpstreamOtherError:
        # Generic feed failures surface as 500, not the upstream code.
        assert info.value.status_code is None


def test_rate_limit_message_carries_retry_after() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, headers={"Retry-After": "30"})

    with pytest.raises(UpstreamRateLimited, match="retry after 30s"):
        asyncio.run(_provider(handler).fetch_positions())


def test_transport_timeout_maps_to_upstream_timeout() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(UpstreamTimeout):
        asyncio.run(_provider(handler).fetch_positions())


def test_invalid_json_is_upstream_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>")

    with pytest.raises(UpstreamOtherError, match="invalid JSON"):
        asyncio.run(_provider(handler).fetch_positions())


def test_legacy_feed_rows_are_mapped_by_position() -> None:
    payload = {
        "full_count": 2,
        "version": 4,
        "2f9a": [
            "A1B2C3", 39.8, -86.1, 90, 1500, 120, "", "F-KIND1",
            "B407", "N407SF", 1767268800, "IND", "", "", 0, 0, "STAT7",
        ],
    }

    records = normalize_feed_payload(payload)

    assert len(records) == 1
    rec = records[0]
    assert rec["id"] == "2f9a"
    assert (rec["latitude"], rec["longitude"]) == (39.8, -86.1)
    assert rec["aircraft_type"] == "B407"
    assert rec["registration"] == "N407SF"
    assert rec["origin"] == "IND"
    assert rec["destination"] is None
    assert rec["callsign"] == "STAT7"


def test_bare_list_payload_skips_non_objects() -> None:
    records = normalize_feed_payload([{"id": "x", "lat": 1, "lon": 2}, "junk"])
    assert [r["id"] for r in records] == ["x"]


@pytest.mark.parametrize(
    "raw",
    ["40,39,-86", "north,south,west,east", "39,40,-86,-85", "40,39,-200,-85"],
)
def test_parse_bounds_rejects_bad_boxes(raw: str) -> None:
    with pytest.raises(ConfigurationError):
        parse_bounds(raw)


def test_env_configures_provider(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FR24_API_TOKEN", "env-token")
    monkeypatch.setenv("FR24_BOUNDS", "41,40,-87,-86")
    monkeypatch.setenv("FR24_CATEGORIES", "")
    monkeypatch.setenv("FR24_TIMEOUT_S", "3.5")
    monkeypatch.delenv("FR24_BASE_URL", raising=False)

    provider = HttpFlightPositionProvider()

    assert provider.api_token == "env-token"
    assert provider.bounds_raw == "41,40,-87,-86"
    assert provider.categories == ""
    assert provider.timeout_s == 3.5
    assert provider.base_url == "https://fr24api.flightradar24.com"
