from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping


class IPositionSource(ABC):
    """Port the viewer polls for the current vehicle snapshot."""

    @abstractmethod
    async def get_positions(self) -> list[Mapping[str, Any]]:
        """Return the raw JSON array served by the positions endpoint."""
