from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from src.adapters.api.dependencies import get_dispatch_service
from src.adapters.api.schemas.dispatch import (
    ClassifySummaryRequestSchema,
    ClassifySummaryResponseSchema,
)
from src.app.services.dispatch_service import DispatchService

router = APIRouter(tags=["dispatch"])


@router.get("/dispatch-records")
async def list_dispatch_records(
    service: DispatchService = Depends(get_dispatch_service),
) -> list[dict[str, Any]]:
    records = await service.list_recent()
    # Pass the upstream records through untouched.
    return [dict(r.fields) for r in records]


@router.post("/classify-summary", response_model=ClassifySummaryResponseSchema)
async def classify_summary(
    req: ClassifySummaryRequestSchema,
    service: DispatchService = Depends(get_dispatch_service),
) -> ClassifySummaryResponseSchema:
    complaint = await service.classify_summary(req.summary)
    return ClassifySummaryResponseSchema(chief_complaint=complaint)
