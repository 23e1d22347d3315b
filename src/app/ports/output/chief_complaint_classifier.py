from __future__ import annotations

from abc import ABC, abstractmethod


class IChiefComplaintClassifier(ABC):
    """Port for a text classifier that names the chief complaint of a call."""

    @abstractmethod
    async def classify(self, summary: str) -> str:
        raise NotImplementedError
