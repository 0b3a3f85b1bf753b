"""
Route proxy principale: toute méthode, tout chemin.

Pipeline: extraction de la clé -> négociation de version ->
compatibilité du body -> construction de la requête -> relais.
"""
import json
import logging
from typing import Any

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse

from ...config.settings import ProxySettings
from ...core.constants import FAVICON_PATH
from ...core.exceptions import AuthenticationError, PayloadTooLargeError
from ...core.models import InboundRequest
from ...proxy.builder import build_outbound_request
from ...proxy.client import ProxyClient
from ...proxy.credentials import extract_api_key, mask_api_key
from ...proxy.relay import relay
from ...proxy.versioning import make_body_compatible, negotiate_version
from ...services.diagnostics import build_debug_payload, is_debug_request

logger = logging.getLogger(__name__)

router = APIRouter()

PROXY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"]


async def read_body(request: Request, max_bytes: int) -> bytes:
    """
    Lit le body entrant en respectant la limite de taille.

    Raises:
        PayloadTooLargeError: Si Content-Length ou le body lu dépasse `max_bytes`
    """
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > max_bytes:
        raise PayloadTooLargeError(limit=max_bytes)

    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > max_bytes:
            raise PayloadTooLargeError(limit=max_bytes)
    return bytes(body)


def decode_body(raw: bytes) -> Any:
    """
    Décode le body JSON.

    Vide -> None; non-JSON ou trop imbriqué pour le décodeur -> octets
    bruts, relayés sans transformation.
    """
    if not raw.strip():
        return None
    try:
        return json.loads(raw)
    except (ValueError, RecursionError):
        return raw


def request_path(request: Request) -> str:
    """Chemin tel qu'envoyé par le client (`%2F` reste `%2F`)."""
    raw_path = request.scope.get("raw_path")
    if raw_path:
        return raw_path.decode("latin-1")
    return request.url.path


async def parse_inbound_request(request: Request, settings: ProxySettings) -> InboundRequest:
    """Construit l'InboundRequest depuis la requête Starlette."""
    raw = await read_body(request, settings.max_body_bytes)
    return InboundRequest.create(
        method=request.method,
        path=request_path(request),
        query=dict(request.query_params),
        headers=dict(request.headers),
        body=decode_body(raw),
        raw_body=raw or None,
    )


@router.api_route(FAVICON_PATH, methods=PROXY_METHODS, include_in_schema=False)
async def favicon():
    """Pas de favicon: 404 vide, hors pipeline."""
    return Response(status_code=404)


@router.api_route("/{path:path}", methods=PROXY_METHODS)
async def proxy_request(request: Request, path: str):
    """
    Proxy vers l'API Gemini avec:
    - Clé API depuis header vendeur, Authorization ou query
    - Choix v1 / v1beta (préfixe du chemin, sinon fonctionnalités du body)
    - Retrait des champs non supportés par v1
    - Relais streaming (SSE compris) des réponses
    """
    settings: ProxySettings = request.app.state.settings
    client: ProxyClient = request.app.state.proxy_client

    inbound = await parse_inbound_request(request, settings)
    api_key = extract_api_key(inbound.headers, inbound.query)

    if is_debug_request(inbound.query, inbound.headers):
        return JSONResponse(content=build_debug_payload(inbound, api_key_found=bool(api_key)))

    if not api_key:
        raise AuthenticationError()

    version = negotiate_version(inbound.path, inbound.body, settings.default_api_version)
    body = make_body_compatible(inbound.body, version)
    outbound = build_outbound_request(inbound, api_key, version, body, settings)

    logger.debug(
        "[PROXY] Transfert %s %s (version=%s, clé=%s)",
        outbound.method,
        outbound.url.split("?", 1)[0],
        version.value,
        mask_api_key(api_key),
    )

    return await relay(client, outbound)
