from __future__ import annotations

import asyncio
import logging
import os

from src.adapters.client.dashboard_api_client import DashboardApiClient
from src.adapters.client.dispatch_feed import DispatchFeed
from src.adapters.client.geojson_painter import GeoJsonFramePainter
from src.adapters.client.position_tracker import PositionTracker
from src.adapters.env import env_float, env_str
from src.app.services.motion_renderer import MotionRenderer

logger = logging.getLogger(__name__)


def build_tracker(client: DashboardApiClient) -> PositionTracker:
    frame_path = env_str("MAP_FRAME_PATH", "map_frame.geojson") or "map_frame.geojson"
    return PositionTracker(
        source=client,
        renderer=MotionRenderer(),
        painter=GeoJsonFramePainter(path=frame_path),
        poll_interval_s=env_float("POSITIONS_POLL_INTERVAL_S", 15.0),
        frame_interval_s=env_float("FRAME_INTERVAL_S", 0.05),
    )


async def run() -> None:
    client = DashboardApiClient()
    tracker = build_tracker(client)
    feed = DispatchFeed(
        client=client,
        poll_interval_s=env_float("DISPATCH_POLL_INTERVAL_S", 15.0),
    )

    logger.info(
        "Viewer polling %s (positions every %ss, dispatch every %ss)",
        client.base_url,
        tracker.poll_interval_s,
        feed.poll_interval_s,
    )
    await asyncio.gather(tracker.run(), feed.run())


def main() -> None:
    logging.basicConfig(
        level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        logger.info("Viewer stopped")


if __name__ == "__main__":
    main()
