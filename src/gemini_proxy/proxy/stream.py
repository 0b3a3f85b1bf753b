"""
Relais streaming de la réponse upstream.

Les chunks sont relayés un par un, dans l'ordre, sans buffer ni
décodage (le `content-encoding` upstream reste valable): SSE et
réponses chunked passent sans latence ajoutée ni mémoire proportionnelle
à la taille du payload. Le backpressure vient du serveur ASGI: le chunk
suivant n'est lu qu'une fois le précédent envoyé.
"""
import logging
from datetime import datetime
from typing import AsyncGenerator, Dict, Mapping

import httpx

from ..core.constants import SAFE_RESPONSE_HEADERS, VENDOR_HEADER_PREFIX
from ..core.exceptions import StreamingError

logger = logging.getLogger(__name__)


# Types d'erreurs streaming connus
STREAMING_ERROR_TYPES = {
    "read_error": "Connexion interrompue par l'upstream",
    "timeout_error": "Timeout lors de la lecture du stream",
    "decode_error": "Erreur de décodage des données",
    "unknown": "Erreur streaming inconnue"
}


def filter_response_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    """
    Garde les headers de la liste autorisée et ceux préfixés `x-goog-`.

    Args:
        headers: Headers de la réponse upstream

    Returns:
        Headers à renvoyer au client
    """
    return {
        name: value
        for name, value in headers.items()
        if name.lower() in SAFE_RESPONSE_HEADERS or name.lower().startswith(VENDOR_HEADER_PREFIX)
    }


def _classify_error(error: Exception) -> str:
    if isinstance(error, httpx.TimeoutException):
        return "timeout_error"
    if isinstance(error, httpx.DecodingError):
        return "decode_error"
    if isinstance(error, (httpx.ReadError, httpx.RemoteProtocolError)):
        return "read_error"
    return "unknown"


async def relay_stream(response: httpx.Response) -> AsyncGenerator[bytes, None]:
    """
    Générateur de relais des chunks de la réponse.

    La réponse est toujours fermée à la sortie, y compris quand le client
    se déconnecte (annulation du générateur): le stream upstream est
    alors abandonné.

    Args:
        response: Réponse HTTPX ouverte en streaming

    Yields:
        Chunks de la réponse, dans l'ordre reçu

    Raises:
        StreamingError: Erreur réseau après le début du relais; la réponse
            cliente est tronquée
    """
    chunk_count = 0
    stream_start_time = datetime.now()

    try:
        async for chunk in response.aiter_raw():
            chunk_count += 1
            yield chunk
    except httpx.HTTPError as e:
        error_type = _classify_error(e)
        _log_streaming_error(error_type, response, chunk_count, str(e), stream_start_time)
        raise StreamingError(
            message=STREAMING_ERROR_TYPES[error_type],
            error_type=error_type,
            chunks_sent=chunk_count,
            details={"reason": str(e)}
        ) from e
    finally:
        await response.aclose()


def _log_streaming_error(
    error_type: str,
    response: httpx.Response,
    chunks_sent: int,
    error: str,
    start_time: datetime
) -> None:
    """
    Log structuré d'un stream tronqué.
    """
    duration = (datetime.now() - start_time).total_seconds()
    logger.warning(
        "[STREAM_ERROR] %s | status=%s chunks=%d durée=%.2fs détail=%s",
        STREAMING_ERROR_TYPES.get(error_type, STREAMING_ERROR_TYPES["unknown"]),
        response.status_code,
        chunks_sent,
        duration,
        error[:200],
    )
