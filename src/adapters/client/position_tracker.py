from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Callable

from src.adapters.client.dashboard_api_client import parse_positions_payload
from src.app.ports.output import IPositionSource
from src.app.services.motion_renderer import MotionRenderer, SnapshotUpdate
from src.domain.models import RenderFrame

logger = logging.getLogger(__name__)

Painter = Callable[[RenderFrame], None]


@dataclass(slots=True)
class PositionTracker:
    """Client-side loops around the motion renderer.

    - The poll loop fetches the vehicle snapshot every `poll_interval_s` and
      runs the renderer's update pass. A failed poll leaves every marker and
      trail as it was.
    - The frame loop advances animations every `frame_interval_s` and paints
      until they settle, then sleeps until the next update.
    """

    source: IPositionSource
    renderer: MotionRenderer = field(default_factory=MotionRenderer)
    painter: Painter | None = None
    poll_interval_s: float = 15.0
    frame_interval_s: float = 0.05
    clock: Callable[[], float] = time.monotonic

    last_success_at: float | None = field(default=None, init=False)
    consecutive_failures: int = field(default=0, init=False)
    paint_failures: int = field(default=0, init=False)
    _wake: asyncio.Event | None = field(default=None, init=False, repr=False)

    def _wake_event(self) -> asyncio.Event:
        if self._wake is None:
            self._wake = asyncio.Event()
        return self._wake

    async def poll_once(self) -> SnapshotUpdate | None:
        """Fetch one snapshot and apply it; None when the poll failed."""

        try:
            items = await self.source.get_positions()
            positions, retained = parse_positions_payload(items)
        except Exception as exc:
            self.consecutive_failures += 1
            logger.warning(
                "Position poll failed (%d in a row); keeping last state: %s",
                self.consecutive_failures,
                exc,
            )
            return None

        now = self.clock()
        update = self.renderer.apply_snapshot(
            positions, now=now, retained_ids=retained
        )
        self.last_success_at = now
        self.consecutive_failures = 0
        self.paint(now)
        if update.animating:
            self._wake_event().set()
        return update

    def paint(self, now: float | None = None) -> bool:
        """Hand the current frame to the painter; False when painting failed.

        A failing painter never stops the loops; the next frame tries again.
        """

        if self.painter is None:
            return True
        try:
            self.painter(self.renderer.render(now))
        except Exception:
            self.paint_failures += 1
            logger.exception("Painting frame failed (%d so far)", self.paint_failures)
            return False
        return True

    def step_frame(self, now: float | None = None) -> bool:
        """Advance and paint one frame; True while animations keep running."""

        now = self.clock() if now is None else now
        running = self.renderer.advance(now)
        self.paint(now)
        return running

    async def run_polling(self) -> None:
        while True:
            await self.poll_once()
            await asyncio.sleep(self.poll_interval_s)

    async def run_frames(self) -> None:
        wake = self._wake_event()
        while True:
            await wake.wait()
            wake.clear()
            while self.step_frame():
                await asyncio.sleep(self.frame_interval_s)

    async def run(self) -> None:
        await asyncio.gather(self.run_polling(), self.run_frames())
