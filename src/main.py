from __future__ import annotations

import logging
import os

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.adapters.api.controllers.dispatch import router as dispatch_router
from src.adapters.api.controllers.positions import router as positions_router
from src.adapters.env import env_bool
from src.domain.exceptions import ConfigurationError, UpstreamError

logging.basicConfig(
    level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Dispatch Dashboard")
app.include_router(positions_router)
app.include_router(dispatch_router)


def _error_body(error: str, details: str | None = None) -> dict[str, str]:
    body = {"error": error}
    if details:
        body["details"] = details
    return body


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(
    request: Request, exc: ConfigurationError
) -> JSONResponse:
    logger.error("Configuration error on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content=_error_body(str(exc)))


@app.exception_handler(UpstreamError)
async def upstream_error_handler(request: Request, exc: UpstreamError) -> JSONResponse:
    """Translate upstream failures into the status codes the dashboard expects.

    Auth, rate-limit and timeout failures keep their own codes; anything else
    relays the upstream status when the adapter recorded one, else 500.
    """

    status_code = exc.status_code or 500
    logger.warning(
        "Upstream failure on %s (%d): %s", request.url.path, status_code, exc
    )
    return JSONResponse(
        status_code=status_code, content=_error_body(str(exc), exc.details)
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Ensure API errors are JSON so the dashboard can display them.

    Starlette's default 500 handler may return plain text/HTML, which the
    dashboard cannot parse.
    """

    logging.getLogger("uvicorn.error").exception(
        "Unhandled exception", extra={"path": str(request.url.path)}
    )

    reveal = env_bool("DASHBOARD_REVEAL_ERRORS")
    if reveal or isinstance(exc, (RuntimeError, ValueError)):
        details = str(exc) or exc.__class__.__name__
    else:
        details = None

    return JSONResponse(
        status_code=500, content=_error_body("Internal Server Error", details)
    )


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
