from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping


class IVehiclePositionProvider(ABC):
    """Port for the rate-limited live aircraft position feed."""

    @abstractmethod
    async def fetch_positions(self) -> tuple[Mapping[str, Any], ...]:
        """Return raw records normalized to canonical keys.

        Records are not validated here; the caller filters them.
        Raises an UpstreamError subclass (or ConfigurationError) on failure.
        """
