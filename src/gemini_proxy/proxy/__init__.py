"""
Pipeline de transformation et relais HTTP vers l'API Gemini.
"""

from .credentials import extract_api_key, mask_api_key
from .versioning import (
    path_version,
    has_beta_features,
    negotiate_version,
    strip_restricted_fields,
    make_body_compatible,
)
from .builder import (
    rewrite_path,
    rewrite_query,
    build_upstream_headers,
    build_outbound_request,
)
from .stream import relay_stream, filter_response_headers
from .client import create_proxy_client, ProxyClient
from .relay import relay

__all__ = [
    "extract_api_key",
    "mask_api_key",
    "path_version",
    "has_beta_features",
    "negotiate_version",
    "strip_restricted_fields",
    "make_body_compatible",
    "rewrite_path",
    "rewrite_query",
    "build_upstream_headers",
    "build_outbound_request",
    "relay_stream",
    "filter_response_headers",
    "create_proxy_client",
    "ProxyClient",
    "relay",
]
