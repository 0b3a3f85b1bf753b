"""
Extraction de la clé API depuis les différents porteurs possibles.

Ordre de recherche (premier trouvé gagne):
1. Header `x-goog-api-key`
2. Header `Authorization` (Bearer ou token brut sans espace)
3. Query: key, api_key, apikey, token, access_token
"""
import re
from typing import Mapping, Optional

from ..core.constants import API_KEY_HEADER, API_KEY_QUERY_PARAMS

_BEARER_RE = re.compile(r"^Bearer\s+(.+)$", re.IGNORECASE | re.DOTALL)


def _lower_keys(headers: Mapping[str, str]) -> dict:
    return {k.lower(): v for k, v in headers.items()}


def _from_authorization(value: str) -> Optional[str]:
    match = _BEARER_RE.match(value)
    if match:
        return match.group(1).strip() or None
    if " " not in value:
        return value.strip() or None
    return None


def extract_api_key(
    headers: Mapping[str, str],
    query: Mapping[str, str]
) -> Optional[str]:
    """
    Localise la clé API fournie par le client.

    Args:
        headers: Headers entrants (noms insensibles à la casse)
        query: Paramètres de query

    Returns:
        La clé (non vide) ou None
    """
    headers = _lower_keys(headers)

    vendor_key = headers.get(API_KEY_HEADER)
    if vendor_key:
        return vendor_key

    auth = headers.get("authorization")
    if auth:
        token = _from_authorization(auth)
        if token:
            return token

    for param in API_KEY_QUERY_PARAMS:
        value = query.get(param)
        if value:
            return value

    return None


def mask_api_key(api_key: Optional[str]) -> str:
    """Rend une clé affichable dans les logs."""
    if not api_key:
        return "<none>"
    if len(api_key) <= 8:
        return "***"
    return f"{api_key[:4]}***{api_key[-2:]}"
