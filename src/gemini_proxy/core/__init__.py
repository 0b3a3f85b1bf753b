"""
Cœur métier de Gemini API Proxy.
Modules indépendants sans dépendances externes au package.
"""

from .exceptions import (
    GeminiProxyError,
    ConfigurationError,
    ProxyHTTPError,
    AuthenticationError,
    PayloadTooLargeError,
    UpstreamConnectionError,
    StreamingError,
)
from .constants import (
    UPSTREAM_HOST,
    DEFAULT_API_VERSION,
    DEFAULT_USER_AGENT,
    RESTRICTED_FIELDS,
    API_KEY_QUERY_PARAMS,
)
from .models import ApiVersion, InboundRequest, OutboundRequest

__all__ = [
    # Exceptions
    "GeminiProxyError",
    "ConfigurationError",
    "ProxyHTTPError",
    "AuthenticationError",
    "PayloadTooLargeError",
    "UpstreamConnectionError",
    "StreamingError",
    # Constants
    "UPSTREAM_HOST",
    "DEFAULT_API_VERSION",
    "DEFAULT_USER_AGENT",
    "RESTRICTED_FIELDS",
    "API_KEY_QUERY_PARAMS",
    # Models
    "ApiVersion",
    "InboundRequest",
    "OutboundRequest",
]
