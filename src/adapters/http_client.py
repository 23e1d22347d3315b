from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from src.domain.exceptions import (
    UpstreamAuthError,
    UpstreamError,
    UpstreamOtherError,
    UpstreamRateLimited,
    UpstreamTimeout,
)

logger = logging.getLogger(__name__)

_MAX_DETAIL_CHARS = 300


def _body_excerpt(resp: httpx.Response) -> str | None:
    text = resp.text.strip()
    return text[:_MAX_DETAIL_CHARS] or None


def error_for_response(
    resp: httpx.Response, *, source: str, relay_status: bool = False
) -> UpstreamError | None:
    """Map a non-2xx upstream response onto the upstream error taxonomy.

    With `relay_status` the upstream status code is kept on
    UpstreamOtherError so the API can pass it through.
    """

    status = resp.status_code
    if status < 400:
        return None

    details = _body_excerpt(resp)
    if status in (401, 403):
        return UpstreamAuthError(
            f"{source} rejected the credential (HTTP {status})", details=details
        )
    if status == 429:
        retry_after = resp.headers.get("Retry-After")
        msg = f"{source} rate limit exceeded"
        if retry_after:
            msg += f" (retry after {retry_after}s)"
        return UpstreamRateLimited(msg, details=details)
    if status in (408, 504):
        return UpstreamTimeout(f"{source} timed out (HTTP {status})", details=details)
    return UpstreamOtherError(
        f"{source} returned HTTP {status}",
        status_code=status if relay_status else None,
        details=details,
    )


async def get_json(
    url: str,
    *,
    source: str,
    headers: Mapping[str, str] | None = None,
    params: Mapping[str, Any] | None = None,
    timeout_s: float = 10.0,
    transport: httpx.AsyncBaseTransport | None = None,
    relay_status: bool = False,
) -> Any:
    """GET a JSON document, raising UpstreamError subclasses on failure."""

    try:
        async with httpx.AsyncClient(timeout=timeout_s, transport=transport) as client:
            resp = await client.get(url, headers=dict(headers or {}), params=params)
    except httpx.TimeoutException as exc:
        raise UpstreamTimeout(f"{source} timed out", details=str(exc)) from exc
    except httpx.HTTPError as exc:
        raise UpstreamOtherError(
            f"{source} request failed", details=f"{type(exc).__name__}: {exc}"
        ) from exc

    error = error_for_response(resp, source=source, relay_status=relay_status)
    if error is not None:
        logger.warning("%s: %s", source, error)
        raise error

    try:
        return resp.json()
    except ValueError as exc:
        raise UpstreamOtherError(
            f"{source} returned invalid JSON", details=str(exc)
        ) from exc
