"""
Gemini API Proxy - Application FastAPI Factory.
Reverse proxy streaming vers l'API Google Generative Language.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.errors import setup_error_handlers
from .api.middleware import ProxyHeadersMiddleware
from .api.router import api_router
from .config.loader import load_settings
from .config.settings import ProxySettings
from .core.constants import CORS_ALLOW_HEADERS, CORS_ALLOW_METHODS, CORS_MAX_AGE
from .proxy.client import create_proxy_client

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[ProxySettings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> FastAPI:
    """
    Factory pour créer l'application FastAPI.

    Args:
        settings: Configuration (sinon chargée depuis config.toml et l'environnement)
        transport: Transport HTTPX alternatif pour l'upstream (tests)

    Returns:
        Instance configurée de FastAPI
    """
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Gestion du cycle de vie de l'application."""
        await _startup(app)
        yield
        await _shutdown(app)

    app = FastAPI(
        title="Gemini API Proxy",
        description="Reverse proxy streaming vers l'API Gemini avec normalisation de clé et de version",
        version="1.0.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = settings
    app.state.proxy_client = create_proxy_client(settings, transport=transport)

    # CORS (intérieur), puis preflight 204 et métadonnées (extérieur)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=CORS_ALLOW_METHODS,
        allow_headers=CORS_ALLOW_HEADERS,
        max_age=CORS_MAX_AGE,
    )
    app.add_middleware(ProxyHeadersMiddleware)
    setup_error_handlers(app)
    app.include_router(api_router)

    return app


async def _startup(app: FastAPI):
    """Initialisation au démarrage."""
    settings: ProxySettings = app.state.settings
    await app.state.proxy_client.start()
    logger.info("[STARTUP] Upstream: %s", settings.upstream_host)
    logger.info(
        "[STARTUP] Version par défaut: %s, debug: %s",
        settings.default_api_version.value, settings.debug
    )


async def _shutdown(app: FastAPI):
    """Arrêt de l'application."""
    await app.state.proxy_client.aclose()
    logger.info("[SHUTDOWN] Client upstream fermé")
