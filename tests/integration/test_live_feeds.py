from __future__ import annotations

import asyncio

import pytest

from src.adapters.persistence import NocoDbDispatchRepository
from src.adapters.realtime.http_flight_position_provider import (
    HttpFlightPositionProvider,
)
from src.app.services.position_cache_service import PositionCacheService


@pytest.mark.integration
def test_flight_feed_snapshot_is_cached(require_flight_feed: None) -> None:
    svc = PositionCacheService(provider=HttpFlightPositionProvider())

    async def scenario():
        first = await svc.get_positions()
        second = await svc.get_positions()
        return first, second

    first, second = asyncio.run(scenario())

    assert second is first
    assert svc.stats["upstream_calls"] == 1
    for p in first:
        assert p.id
        assert -90.0 <= p.latitude <= 90.0
        assert -180.0 <= p.longitude <= 180.0


@pytest.mark.integration
def test_nocodb_returns_dispatch_records(require_nocodb: None) -> None:
    records = asyncio.run(NocoDbDispatchRepository(limit=5).list_recent())

    for rec in records:
        assert isinstance(rec.id, int)
        assert rec.fields["id"] == rec.id
