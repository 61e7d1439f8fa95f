"""Exchange clients."""

from app.clients.okx_rest import OkxApiError, OkxRestClient, RateLimiter

__all__ = [
    "OkxApiError",
    "OkxRestClient",
    "RateLimiter",
]
