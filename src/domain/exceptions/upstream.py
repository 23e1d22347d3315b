from __future__ import annotations


class DashboardError(Exception):
    """Base exception for dashboard failures."""


class ConfigurationError(DashboardError):
    """Raised when a required credential or setting is missing."""


class ValidationError(DashboardError, ValueError):
    """Raised when a single upstream record is malformed."""


class UpstreamError(DashboardError):
    """Base exception for failed calls to an external provider."""

    status_code: int | None = None

    def __init__(self, message: str, *, details: str | None = None) -> None:
        super().__init__(message)
        self.details = details


class UpstreamAuthError(UpstreamError):
    """The provider rejected our credential (HTTP 401/403)."""

    status_code = 401


class UpstreamRateLimited(UpstreamError):
    """The provider rejected the call because of its rate limit (HTTP 429)."""

    status_code = 429


class UpstreamTimeout(UpstreamError):
    status_code = 504


class UpstreamOtherError(UpstreamError):
    """Any other provider failure; relays the upstream status when known."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        details: str | None = None,
    ) -> None:
        super().__init__(message, details=details)
        self.status_code = status_code
