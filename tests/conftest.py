"""
Configuration des tests pytest.
"""
import pytest
import sys
import os

import httpx

# Ajoute src au path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from gemini_proxy.config.settings import ProxySettings  # noqa: E402
from gemini_proxy.core.models import InboundRequest  # noqa: E402


@pytest.fixture
def anyio_backend():
    """Tests async sur asyncio uniquement."""
    return "asyncio"


@pytest.fixture
def settings():
    """Fixture pour la configuration de test."""
    return ProxySettings()


@pytest.fixture
def upstream_calls():
    """Requêtes reçues par le faux upstream."""
    return []


@pytest.fixture
def make_transport(upstream_calls):
    """
    Fabrique un MockTransport HTTPX qui enregistre les requêtes.

    `handler(request)` retourne la réponse upstream simulée. Une réponse
    construite avec `content=` ou `json=` est déjà lue par HTTPX: elle est
    rejouée comme un stream réseau, lisible par `aiter_raw`.
    """
    def _make(handler):
        def _record(request: httpx.Request) -> httpx.Response:
            upstream_calls.append(request)
            response = handler(request)
            if response.is_stream_consumed:
                return httpx.Response(
                    response.status_code,
                    headers=response.headers,
                    stream=httpx.ByteStream(response.content),
                )
            return response
        return httpx.MockTransport(_record)
    return _make


@pytest.fixture
def sample_body():
    """Body generateContent sans champ restreint."""
    return {
        "contents": [
            {"role": "user", "parts": [{"text": "Bonjour, comment ça va?"}]}
        ],
        "generationConfig": {"temperature": 0.2},
    }


@pytest.fixture
def make_inbound():
    """Fabrique d'InboundRequest."""
    def _make(method="GET", path="/models", query=None, headers=None, body=None):
        return InboundRequest.create(method, path, query=query, headers=headers, body=body)
    return _make
