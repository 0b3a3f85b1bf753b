"""
Relais d'une requête sortante vers l'upstream et retour de la réponse.
"""
import logging
import uuid

from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from ..core.constants import PROXY_REQUEST_ID_HEADER
from ..core.models import OutboundRequest
from .client import ProxyClient
from .stream import filter_response_headers, relay_stream

logger = logging.getLogger(__name__)


async def relay(client: ProxyClient, outbound: OutboundRequest) -> StreamingResponse:
    """
    Envoie la requête et relaie la réponse en streaming.

    Le status upstream est relayé tel quel (4xx/5xx compris).

    Raises:
        UpstreamConnectionError: Si l'upstream est injoignable (avant tout octet)
    """
    response = await client.send_streaming(outbound)

    headers = filter_response_headers(response.headers)
    headers[PROXY_REQUEST_ID_HEADER] = str(uuid.uuid4())

    logger.debug(
        "[RELAY] %s %s -> %d (%s)",
        outbound.method, outbound.version.value, response.status_code,
        response.headers.get("content-type", "-")
    )

    return StreamingResponse(
        relay_stream(response),
        status_code=response.status_code,
        headers=headers,
        background=BackgroundTask(response.aclose),
    )
