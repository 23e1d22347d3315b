from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from src.adapters.env import env_float, env_int, env_str
from src.adapters.http_client import get_json
from src.app.ports.output import IDispatchRecordRepository
from src.domain.exceptions import ConfigurationError, UpstreamOtherError
from src.domain.models import DispatchRecord

logger = logging.getLogger(__name__)


class ConversationAnalysis(BaseModel):
    model_config = ConfigDict(extra="allow")

    summary: str | None = None
    generatedAt: str | None = None


class NocoDbRecord(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: int
    timestamp: str | None = None
    conversation_analysis: ConversationAnalysis | None = None


class NocoDbPageInfo(BaseModel):
    totalRows: int | None = None
    page: int | None = None
    pageSize: int | None = None
    isFirstPage: bool | None = None
    isLastPage: bool | None = None


class NocoDbRecordsPage(BaseModel):
    items: list[NocoDbRecord] = Field(alias="list")
    pageInfo: NocoDbPageInfo | None = None


def _to_domain(raw: dict[str, Any], record: NocoDbRecord) -> DispatchRecord:
    analysis = record.conversation_analysis
    return DispatchRecord(
        id=record.id,
        timestamp=record.timestamp,
        summary=analysis.summary if analysis else None,
        generated_at=analysis.generatedAt if analysis else None,
        fields=raw,
    )


@dataclass(slots=True)
class NocoDbDispatchRepository(IDispatchRecordRepository):
    """Reads recent dispatch calls from a NocoDB table (v2 records API).

    Env vars:
      - NOCODB_BASE_URL, NOCODB_API_TOKEN, NOCODB_TABLE_ID (required)
      - NOCODB_LIMIT: records per request (default 100)
      - NOCODB_TIMEOUT_S: request timeout (default 10)
    """

    base_url: str | None = None
    api_token: str | None = None
    table_id: str | None = None
    limit: int = 100
    timeout_s: float = 10.0
    transport: httpx.AsyncBaseTransport | None = None

    def __post_init__(self) -> None:
        if self.base_url is None:
            self.base_url = env_str("NOCODB_BASE_URL")
        if self.api_token is None:
            self.api_token = env_str("NOCODB_API_TOKEN")
        if self.table_id is None:
            self.table_id = env_str("NOCODB_TABLE_ID")
        self.limit = env_int("NOCODB_LIMIT", self.limit)
        self.timeout_s = env_float("NOCODB_TIMEOUT_S", self.timeout_s)

    async def list_recent(self) -> tuple[DispatchRecord, ...]:
        if not (self.base_url and self.api_token and self.table_id):
            raise ConfigurationError(
                "Server configuration error: Missing NocoDB credentials"
            )

        url = f"{self.base_url.rstrip('/')}/api/v2/tables/{self.table_id}/records"
        try:
            payload = await get_json(
                url,
                source="NocoDB",
                headers={"xc-token": self.api_token},
                # Most recent first.
                params={"limit": self.limit, "offset": 0, "sort": "-CreatedAt"},
                timeout_s=self.timeout_s,
                transport=self.transport,
                relay_status=True,
            )
        except UpstreamOtherError as exc:
            if exc.status_code == 404:
                raise UpstreamOtherError(
                    "Table not found: Invalid NocoDB table ID",
                    status_code=404,
                    details=exc.details,
                ) from exc
            raise

        try:
            page = NocoDbRecordsPage.model_validate(payload)
        except ValidationError as exc:
            raise UpstreamOtherError(
                "NocoDB returned an unexpected payload",
                details=str(exc),
            ) from exc

        raw_items = payload["list"]
        records = tuple(
            _to_domain(raw, rec) for raw, rec in zip(raw_items, page.items)
        )
        logger.debug("Fetched %d dispatch records", len(records))
        return records
