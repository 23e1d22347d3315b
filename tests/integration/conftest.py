from __future__ import annotations

import os

import pytest


def _live_or_skip(*names: str) -> None:
    missing = [n for n in names if not os.getenv(n)]
    if not missing:
        return

    msg = f"Live feed credentials not set: {', '.join(missing)}"

    # CI jobs that export REQUIRE_LIVE_FEEDS expect the feeds to be reachable.
    if os.getenv("REQUIRE_LIVE_FEEDS"):
        pytest.fail(msg, pytrace=False)

    pytest.skip(f"{msg}; skipping integration tests")


@pytest.fixture(scope="session")
def require_flight_feed() -> None:
    _live_or_skip("FR24_API_TOKEN")


@pytest.fixture(scope="session")
def require_nocodb() -> None:
    _live_or_skip("NOCODB_BASE_URL", "NOCODB_API_TOKEN", "NOCODB_TABLE_ID")
