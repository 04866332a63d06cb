"""Infrastructure layer for Honeywell Evohome integration.

This package contains core infrastructure components:
- API utilities (decorators routing calls through the request queue)
- Serial request queue and short-lived read cache
- Error definitions
"""

from .api import api_get, api_put
from .cache import DEFAULT_CACHE_TTL, ShortTTLCache
from .errors import (
    HoneywellError,
    RegistrationError,
    RemoteRequestError,
    TokenRefreshError,
    UnknownDeviceError,
    UnknownNotificationError,
)
from .request_queue import RequestQueue

__all__ = [
    # API decorators
    "api_get",
    "api_put",
    # Queue and cache
    "RequestQueue",
    "ShortTTLCache",
    "DEFAULT_CACHE_TTL",
    # Errors
    "HoneywellError",
    "RemoteRequestError",
    "RegistrationError",
    "UnknownDeviceError",
    "UnknownNotificationError",
    "TokenRefreshError",
]
