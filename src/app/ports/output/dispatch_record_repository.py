from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.models import DispatchRecord


class IDispatchRecordRepository(ABC):
    """Port for the dispatch-call record store."""

    @abstractmethod
    async def list_recent(self) -> tuple[DispatchRecord, ...]:
        raise NotImplementedError
