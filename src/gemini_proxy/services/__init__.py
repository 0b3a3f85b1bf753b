"""
Services transverses (diagnostic).
"""

from .diagnostics import is_debug_request, build_debug_payload, get_server_info

__all__ = [
    "is_debug_request",
    "build_debug_payload",
    "get_server_info",
]
