"""
Handlers d'exceptions: erreurs locales rendues dans l'enveloppe d'erreur Google.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..core.exceptions import ProxyHTTPError

logger = logging.getLogger(__name__)


def setup_error_handlers(app: FastAPI) -> None:
    """Enregistre les handlers sur l'application."""

    @app.exception_handler(ProxyHTTPError)
    async def proxy_http_error_handler(request: Request, exc: ProxyHTTPError) -> JSONResponse:
        logger.info(
            "[ERROR] %s %s -> %d %s",
            request.method, request.url.path, exc.http_status, exc.status
        )
        return JSONResponse(content=exc.to_envelope(), status_code=exc.http_status)
