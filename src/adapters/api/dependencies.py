from __future__ import annotations

import os
from functools import lru_cache

from src.adapters.env import env_float
from src.adapters.llm.anthropic_chief_complaint_classifier import (
    AnthropicChiefComplaintClassifier,
)
from src.adapters.persistence import NocoDbDispatchRepository
from src.adapters.realtime.http_flight_position_provider import (
    HttpFlightPositionProvider,
)
from src.app.ports.output import IChiefComplaintClassifier
from src.app.services.dispatch_service import DispatchService
from src.app.services.position_cache_service import FailurePolicy, PositionCacheService


@lru_cache(maxsize=1)
def get_position_cache_service() -> PositionCacheService:
    # One cache per process: every request must share the in-flight refresh.
    service = PositionCacheService(provider=HttpFlightPositionProvider())

    # Allow tuning via env without changing code.
    service.ttl_s = env_float("POSITIONS_CACHE_TTL_S", service.ttl_s)
    policy = (os.getenv("POSITIONS_FAILURE_POLICY") or "").strip().lower()
    if policy:
        service.failure_policy = FailurePolicy(policy)

    return service


@lru_cache(maxsize=1)
def get_chief_complaint_classifier() -> IChiefComplaintClassifier | None:
    if not os.getenv("ANTHROPIC_API_KEY"):
        return None
    return AnthropicChiefComplaintClassifier()


def get_dispatch_service() -> DispatchService:
    return DispatchService(
        repository=NocoDbDispatchRepository(),
        classifier=get_chief_complaint_classifier(),
    )
