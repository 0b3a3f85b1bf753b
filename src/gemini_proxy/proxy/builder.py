"""
Construction de la requête sortante (URL, query, headers, body).

Fonctions pures: aucun appel réseau ici.
"""
import json
import logging
from typing import Any, Dict, Mapping, Optional
from urllib.parse import quote, urlencode

from ..config.settings import ProxySettings
from ..core.constants import (
    SKIPPED_REQUEST_HEADERS,
    STRIPPED_QUERY_PARAMS,
    VERSION_PATH_PREFIXES,
)
from ..core.models import ApiVersion, InboundRequest, OutboundRequest

logger = logging.getLogger(__name__)

# Caractères laissés tels quels dans le chemin (":" pour models/x:generateContent,
# "%" pour les séquences déjà encodées par le client)
_PATH_SAFE_CHARS = "/:@!$&'()*+,;=-._~%"


def rewrite_path(path: str, version: ApiVersion) -> str:
    """
    Préfixe le chemin par `/<version>` sauf s'il porte déjà une version.

    Un préfixe `/v1/` ou `/v1beta/` existant est conservé, même s'il
    diffère de la version négociée.
    """
    if path.startswith(VERSION_PATH_PREFIXES):
        return path
    separator = "" if path.startswith("/") else "/"
    return f"/{version.value}{separator}{path}"


def rewrite_query(query: Mapping[str, str], api_key: str) -> Dict[str, str]:
    """
    Retire les paramètres de clé et `debug`, puis réinjecte `key`.

    Retourne un nouveau dict: la query d'origine n'est pas modifiée.
    """
    params = {k: v for k, v in query.items() if k not in STRIPPED_QUERY_PARAMS}
    params["key"] = api_key
    return params


def encode_query(params: Mapping[str, str]) -> str:
    """Sérialise les paramètres dans l'ordre d'insertion."""
    return urlencode(list(params.items()))


def build_upstream_headers(headers: Mapping[str, str], user_agent: str) -> Dict[str, str]:
    """
    Headers envoyés à l'upstream.

    Base `Content-Type` + `User-Agent`, puis copie des headers entrants
    hors liste d'exclusion. Un header entrant remplace la valeur de base
    de même nom, quelle que soit la casse.
    """
    upstream_headers = {
        "Content-Type": "application/json",
        "User-Agent": user_agent,
    }
    for name, value in headers.items():
        lowered = name.lower()
        if lowered in SKIPPED_REQUEST_HEADERS:
            continue
        for existing in [k for k in upstream_headers if k.lower() == lowered]:
            del upstream_headers[existing]
        upstream_headers[name] = value
    return upstream_headers


def encode_body(body: Any) -> Optional[bytes]:
    """JSON compact pour un body structuré, octets bruts inchangés."""
    if body is None:
        return None
    if isinstance(body, (bytes, bytearray)):
        return bytes(body)
    return json.dumps(body, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def encode_content(inbound: InboundRequest, body: Any) -> Optional[bytes]:
    """
    Body sortant encodé.

    Un JSON trop imbriqué pour l'encodeur (RecursionError) part tel que
    reçu du client: le proxy ne le rejette pas.
    """
    try:
        return encode_body(body)
    except RecursionError:
        logger.warning(
            "[BUILDER] Body trop imbriqué pour être réencodé, relayé tel quel (%d octets)",
            len(inbound.raw_body or b"")
        )
        return inbound.raw_body


def build_target_url(upstream_host: str, path: str, params: Mapping[str, str]) -> str:
    """URL complète `<host><path>?<query>`."""
    query_string = encode_query(params)
    url = f"{upstream_host}{quote(path, safe=_PATH_SAFE_CHARS)}"
    return f"{url}?{query_string}" if query_string else url


def build_outbound_request(
    inbound: InboundRequest,
    api_key: str,
    version: ApiVersion,
    body: Any,
    settings: ProxySettings
) -> OutboundRequest:
    """
    Assemble la requête sortante.

    Args:
        inbound: Requête entrante
        api_key: Clé extraite
        version: Version négociée
        body: Body déjà rendu compatible avec `version`
        settings: Configuration du proxy

    Returns:
        OutboundRequest prête à être envoyée
    """
    target_path = rewrite_path(inbound.path, version)
    params = rewrite_query(inbound.query, api_key)

    return OutboundRequest(
        method=inbound.method,
        url=build_target_url(settings.upstream_host, target_path, params),
        headers=build_upstream_headers(inbound.headers, settings.user_agent),
        version=version,
        content=encode_content(inbound, body),
    )
