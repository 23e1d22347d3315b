from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from src.adapters.api.dependencies import get_position_cache_service
from src.adapters.api.schemas.positions import ErrorSchema, VehiclePositionSchema
from src.app.services.position_cache_service import PositionCacheService

router = APIRouter(tags=["positions"])

_ERROR_RESPONSES = {
    401: {"model": ErrorSchema, "description": "Upstream rejected the credential"},
    429: {"model": ErrorSchema, "description": "Upstream rate limit"},
    500: {"model": ErrorSchema, "description": "Configuration or upstream error"},
    504: {"model": ErrorSchema, "description": "Upstream timeout"},
}


@router.get(
    "/positions",
    response_model=list[VehiclePositionSchema],
    response_model_exclude_none=True,
    responses=_ERROR_RESPONSES,
)
async def list_positions(
    response: Response,
    service: PositionCacheService = Depends(get_position_cache_service),
) -> list[VehiclePositionSchema]:
    snapshot = await service.get_positions()
    response.headers["X-Captured-At"] = snapshot.captured_at.isoformat()
    return [VehiclePositionSchema.from_domain(p) for p in snapshot]
