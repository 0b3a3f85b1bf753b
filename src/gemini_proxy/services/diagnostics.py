"""
Mode debug: payload de diagnostic renvoyé à la place du relais.

Le payload indique seulement si une clé a été trouvée, jamais sa valeur.
"""
import os
import platform
import sys
from typing import Any, Dict, Mapping

from ..core.constants import DEBUG_HEADER, DEBUG_QUERY_PARAM
from ..core.models import InboundRequest


def is_debug_request(query: Mapping[str, str], headers: Mapping[str, str]) -> bool:
    """`?debug=true` ou header `http-debug: true`."""
    if query.get(DEBUG_QUERY_PARAM) == "true":
        return True
    return any(
        name.lower() == DEBUG_HEADER and value == "true"
        for name, value in headers.items()
    )


def _memory_usage() -> Dict[str, Any]:
    if sys.platform == "win32":
        return {}
    import resource

    usage = resource.getrusage(resource.RUSAGE_SELF)
    # ru_maxrss: kilo-octets sous Linux, octets sous macOS
    scale = 1 if sys.platform == "darwin" else 1024
    return {"max_rss_bytes": usage.ru_maxrss * scale}


def get_server_info() -> Dict[str, Any]:
    """Métadonnées du processus et du runtime."""
    return {
        "platform": sys.platform,
        "python_version": platform.python_version(),
        "implementation": platform.python_implementation(),
        "pid": os.getpid(),
        "memory": _memory_usage(),
    }


def build_debug_payload(inbound: InboundRequest, api_key_found: bool) -> Dict[str, Any]:
    """
    Construit le payload de diagnostic.

    Args:
        inbound: Requête entrante
        api_key_found: True si une clé a été extraite

    Returns:
        Dictionnaire JSON-sérialisable
    """
    return {
        "debug": True,
        "method": inbound.method,
        "path": inbound.path,
        "api_key_found": api_key_found,
        "server_info": get_server_info(),
    }
