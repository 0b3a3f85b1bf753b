"""
Middleware HTTP: preflight 204, identifiant de requête et temps de traitement.

Les headers CORS eux-mêmes viennent de CORSMiddleware (voir main.py),
placé à l'intérieur de ce middleware.
"""
import time
import uuid
from typing import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..core.constants import REQUEST_ID_HEADER, RESPONSE_TIME_HEADER

# Headers du body de la réponse preflight interne, sans objet pour un 204
_BODY_HEADERS = ("content-length", "content-type")


def is_preflight(request: Request) -> bool:
    """Preflight CORS: OPTIONS avec Origin et Access-Control-Request-Method."""
    return (
        request.method == "OPTIONS"
        and "origin" in request.headers
        and "access-control-request-method" in request.headers
    )


async def preflight_response(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """
    Réponse 204 sans body à une requête OPTIONS.

    Un vrai preflight passe par CORSMiddleware, qui répond 200 "OK":
    ses headers CORS sont repris sur un 204 vide. Les autres OPTIONS ne
    sont pas des requêtes CORS et n'atteignent jamais la route proxy.
    """
    if not is_preflight(request):
        return Response(status_code=204)

    inner = await call_next(request)
    async for _ in inner.body_iterator:
        pass
    headers = {
        name: value
        for name, value in inner.headers.items()
        if name.lower() not in _BODY_HEADERS
    }
    return Response(status_code=204, headers=headers)


class ProxyHeadersMiddleware(BaseHTTPMiddleware):
    """
    Ajoute `X-Request-ID` (nouveau à chaque réponse) et `X-Response-Time`
    à toutes les réponses.

    Les requêtes OPTIONS reçoivent directement un 204 sans body.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        start = time.perf_counter()
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        if request.method == "OPTIONS":
            response = await preflight_response(request, call_next)
        else:
            response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = request_id
        # Mesuré à l'envoi des headers: le body streamé n'est pas inclus
        elapsed_ms = (time.perf_counter() - start) * 1000
        response.headers[RESPONSE_TIME_HEADER] = f"{elapsed_ms:.2f}ms"
        return response
