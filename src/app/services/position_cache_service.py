from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Iterable, Mapping

from src.app.ports.output import IVehiclePositionProvider
from src.domain.models import (
    CacheEntry,
    Snapshot,
    VehiclePosition,
    parse_vehicle_position,
)

logger = logging.getLogger(__name__)


class FailurePolicy(str, Enum):
    """What a failed refresh does to the previous cache entry."""

    CLEAR = "clear"  # drop it; the failure reaches every waiter
    KEEP_LAST_GOOD = "keep_last_good"  # serve it to this refresh's waiters


def _consume_exception(task: asyncio.Task[Any]) -> None:
    # Waiters may all have gone away; mark the outcome as retrieved.
    if not task.cancelled():
        task.exception()


@dataclass(slots=True)
class PositionCacheService:
    """TTL cache with single-flight refreshes in front of the position feed.

    - Within `ttl_s` of a successful fetch the cached snapshot is returned.
    - On a miss, at most one upstream fetch is in flight; concurrent callers
      await that same task and all observe the same snapshot or the same error.
    - A waiter that is cancelled never cancels the shared refresh.
    """

    provider: IVehiclePositionProvider
    ttl_s: float = 60.0
    failure_policy: FailurePolicy = FailurePolicy.CLEAR
    clock: Callable[[], float] = time.monotonic

    _entry: CacheEntry | None = field(default=None, init=False, repr=False)
    _in_flight: asyncio.Task[Snapshot] | None = field(
        default=None, init=False, repr=False
    )
    _hits: int = field(default=0, init=False, repr=False)
    _misses: int = field(default=0, init=False, repr=False)
    _coalesced: int = field(default=0, init=False, repr=False)
    _upstream_calls: int = field(default=0, init=False, repr=False)

    async def get_positions(self) -> Snapshot:
        entry = self._entry
        if entry is not None and self.clock() - entry.fetched_at < self.ttl_s:
            self._hits += 1
            logger.debug("Position cache hit (%d vehicles)", len(entry.snapshot))
            return entry.snapshot

        if self._in_flight is not None:
            self._coalesced += 1
            logger.debug("Position cache miss coalesced onto in-flight refresh")
            return await asyncio.shield(self._in_flight)

        self._misses += 1
        logger.info("Position cache miss; refreshing from upstream")
        task = asyncio.get_running_loop().create_task(self._refresh())
        task.add_done_callback(_consume_exception)
        self._in_flight = task
        return await asyncio.shield(task)

    async def _refresh(self) -> Snapshot:
        try:
            self._upstream_calls += 1
            try:
                records = await self.provider.fetch_positions()
                snapshot = self._build_snapshot(records)
            except Exception as exc:
                return self._on_failure(exc)

            self._entry = CacheEntry(snapshot=snapshot, fetched_at=self.clock())
            return snapshot
        finally:
            self._in_flight = None

    def _build_snapshot(self, records: Iterable[Mapping[str, Any]]) -> Snapshot:
        positions: list[VehiclePosition] = []
        dropped = 0
        for record in records:
            try:
                positions.append(parse_vehicle_position(record))
            except ValueError as exc:
                # ValidationError and any other per-record parse failure.
                dropped += 1
                logger.warning("Dropping invalid position record: %s", exc)

        snapshot = Snapshot.from_positions(
            positions, captured_at=datetime.now(timezone.utc)
        )
        logger.info(
            "Position cache refreshed: %d vehicles kept, %d records dropped",
            len(snapshot),
            dropped,
        )
        return snapshot

    def _on_failure(self, exc: Exception) -> Snapshot:
        previous = self._entry
        keep = self.failure_policy is FailurePolicy.KEEP_LAST_GOOD
        if keep and previous is not None:
            # Keep the old fetched_at so the next call retries upstream.
            logger.warning(
                "Position refresh failed (%s); serving last good snapshot", exc
            )
            return previous.snapshot

        self._entry = None
        logger.warning("Position refresh failed; cache cleared: %s", exc)
        raise exc

    @property
    def stats(self) -> dict[str, Any]:
        entry = self._entry
        return {
            "hits": self._hits,
            "misses": self._misses,
            "coalesced": self._coalesced,
            "upstream_calls": self._upstream_calls,
            "in_flight": self._in_flight is not None,
            "entry_age_s": (self.clock() - entry.fetched_at) if entry else None,
            "vehicles": len(entry.snapshot) if entry else 0,
        }
