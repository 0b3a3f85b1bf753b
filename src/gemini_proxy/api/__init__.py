"""
Couche HTTP: routes, middleware et handlers d'erreurs.
"""

from .router import api_router
from .middleware import ProxyHeadersMiddleware
from .errors import setup_error_handlers

__all__ = [
    "api_router",
    "ProxyHeadersMiddleware",
    "setup_error_handlers",
]
