from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ClassifySummaryRequestSchema(BaseModel):
    summary: str = ""


class ClassifySummaryResponseSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    chief_complaint: str = Field(..., alias="chiefComplaint")
