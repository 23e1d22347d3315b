from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping

from src.adapters.client.dashboard_api_client import DashboardApiClient
from src.domain.algorithms.chief_complaint import extract_chief_complaint

logger = logging.getLogger(__name__)


def _timestamp_key(record: Mapping[str, Any]) -> float:
    raw = record.get("timestamp")
    if not isinstance(raw, str) or not raw.strip():
        return 0.0
    try:
        parsed = datetime.fromisoformat(raw.strip().replace("Z", "+00:00"))
    except ValueError:
        return 0.0
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


def _summary(record: Mapping[str, Any]) -> str:
    analysis = record.get("conversation_analysis")
    if isinstance(analysis, Mapping):
        summary = analysis.get("summary")
        if isinstance(summary, str):
            return summary
    return ""


@dataclass(slots=True)
class DispatchCall:
    record: Mapping[str, Any]
    chief_complaint: str
    is_new: bool = False

    @property
    def id(self) -> int:
        return int(self.record["id"])


@dataclass(slots=True)
class DispatchFeed:
    """Polled list of dispatch calls, newest first.

    A call is flagged new when its id was not in the previous non-empty
    poll; nothing is new on the first poll. Chief complaints are resolved
    once per call id, at most `max_concurrent_classifications` at a time.
    """

    client: DashboardApiClient
    poll_interval_s: float = 15.0
    max_concurrent_classifications: int = 4

    calls: list[DispatchCall] = field(default_factory=list, init=False)
    _previous_ids: set[int] = field(default_factory=set, init=False, repr=False)
    _complaints: dict[int, str] = field(default_factory=dict, init=False, repr=False)
    _classify_slots: asyncio.Semaphore | None = field(
        default=None, init=False, repr=False
    )

    def _slots(self) -> asyncio.Semaphore:
        if self._classify_slots is None:
            limit = self.max_concurrent_classifications
            self._classify_slots = asyncio.Semaphore(limit)
        return self._classify_slots

    async def _chief_complaint(self, call_id: int, summary: str) -> str:
        cached = self._complaints.get(call_id)
        if cached is not None:
            return cached
        if not summary.strip():
            complaint = extract_chief_complaint(summary)
        else:
            try:
                async with self._slots():
                    complaint = await self.client.classify_summary(summary)
            except Exception as exc:
                logger.warning("Classifying call %s failed: %s", call_id, exc)
                complaint = extract_chief_complaint(summary)
        self._complaints[call_id] = complaint
        return complaint

    async def poll_once(self) -> list[DispatchCall] | None:
        try:
            records = await self.client.get_dispatch_records()
        except Exception as exc:
            logger.warning("Dispatch poll failed; keeping last list: %s", exc)
            return None

        usable = [
            r
            for r in records
            if isinstance(r, Mapping) and isinstance(r.get("id"), int)
        ]
        usable.sort(key=_timestamp_key, reverse=True)

        current_ids = {int(r["id"]) for r in usable}
        had_previous = bool(self._previous_ids)
        complaints = await asyncio.gather(
            *(self._chief_complaint(int(r["id"]), _summary(r)) for r in usable)
        )
        calls = [
            DispatchCall(
                record=record,
                chief_complaint=complaint,
                is_new=had_previous and int(record["id"]) not in self._previous_ids,
            )
            for record, complaint in zip(usable, complaints)
        ]

        if current_ids:
            self._previous_ids = current_ids
        # Forget complaints for calls that dropped off the list.
        for stale in set(self._complaints) - current_ids:
            del self._complaints[stale]

        self.calls = calls
        fresh = [c.id for c in calls if c.is_new]
        if fresh:
            logger.info("New dispatch calls: %s", fresh)
        return calls

    @property
    def new_calls(self) -> list[DispatchCall]:
        return [c for c in self.calls if c.is_new]

    async def run(self) -> None:
        while True:
            await self.poll_once()
            await asyncio.sleep(self.poll_interval_s)
