from .upstream import (
    ConfigurationError,
    DashboardError,
    UpstreamAuthError,
    UpstreamError,
    UpstreamOtherError,
    UpstreamRateLimited,
    UpstreamTimeout,
    ValidationError,
)

__all__ = [
    "ConfigurationError",
    "DashboardError",
    "UpstreamAuthError",
    "UpstreamError",
    "UpstreamOtherError",
    "UpstreamRateLimited",
    "UpstreamTimeout",
    "ValidationError",
]
