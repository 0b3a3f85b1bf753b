"""
Tests E2E pour la gestion des erreurs de relais.

Pourquoi: vérifier la frontière entre erreur avant réponse (502 propre)
et erreur après les premiers octets (stream tronqué, loggé).
"""
import logging

import pytest
import httpx

from gemini_proxy.core.exceptions import StreamingError, UpstreamConnectionError
from gemini_proxy.core.models import ApiVersion, OutboundRequest
from gemini_proxy.proxy.client import ProxyClient
from gemini_proxy.proxy.relay import relay

pytestmark = pytest.mark.anyio


OUTBOUND = OutboundRequest(
    method="POST",
    url="https://generativelanguage.googleapis.com/v1beta/models/gemini:streamGenerateContent?alt=sse&key=K",
    headers={"Content-Type": "application/json"},
    version=ApiVersion.V1BETA,
    content=b'{"contents":[]}',
)


class FailingStream(httpx.AsyncByteStream):
    """Stream upstream qui casse après un premier événement."""

    def __init__(self):
        self.closed = False

    async def __aiter__(self):
        yield b'data: {"candidates": [{"content": {"parts": [{"text": "Hel"}]}}]}\r\n\r\n'
        raise httpx.ReadError("Connection reset by peer")

    async def aclose(self):
        self.closed = True


async def test_streaming_read_error_truncates(settings, caplog):
    """ReadError pendant le relais: chunks déjà reçus conservés, erreur loggée."""
    stream = FailingStream()
    transport = httpx.MockTransport(
        lambda request: httpx.Response(200, headers={"content-type": "text/event-stream"}, stream=stream)
    )

    async with ProxyClient(settings, transport=transport) as client:
        response = await relay(client, OUTBOUND)
        assert response.status_code == 200

        chunks = []
        with caplog.at_level(logging.WARNING, logger="gemini_proxy.proxy.stream"):
            with pytest.raises(StreamingError):
                async for chunk in response.body_iterator:
                    chunks.append(chunk)

    assert len(chunks) == 1
    assert chunks[0].startswith(b"data: ")
    assert stream.closed
    assert any("STREAM_ERROR" in record.getMessage() for record in caplog.records)


async def test_connect_error_before_response(settings):
    """Erreur de connexion: aucune réponse commencée, erreur convertible en 502."""
    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    async with ProxyClient(settings, transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(UpstreamConnectionError) as exc_info:
            await relay(client, OUTBOUND)

    envelope = exc_info.value.to_envelope()
    assert envelope["error"]["code"] == 502
    assert envelope["error"]["status"] == "BAD_GATEWAY"
    assert envelope["error"]["message"] == "Failed to connect to Google Gemini API: timed out"


async def test_gzip_response_relayed_as_is(settings):
    """Body compressé relayé octet pour octet, avec son content-encoding."""
    import gzip

    payload = b'{"candidates": []}'

    def handler(request):
        return httpx.Response(
            200,
            headers={"content-type": "application/json", "content-encoding": "gzip"},
            stream=httpx.ByteStream(gzip.compress(payload, mtime=0)),
        )

    async with ProxyClient(settings, transport=httpx.MockTransport(handler)) as client:
        response = await relay(client, OUTBOUND)
        body = b"".join([chunk async for chunk in response.body_iterator])

    assert body == gzip.compress(payload, mtime=0)
    assert response.headers["content-encoding"] == "gzip"
    assert response.headers["content-type"] == "application/json"
