"""
Client HTTPX partagé pour les appels vers l'upstream.

Un seul AsyncClient par processus: pool de connexions réutilisé entre
les requêtes, ouvert et fermé par le lifespan de l'application.
Pas de retry: chaque requête est relayée une seule fois.
"""
import logging
from typing import Optional

import httpx

from ..config.settings import ProxySettings
from ..core.constants import BODY_METHODS
from ..core.exceptions import UpstreamConnectionError
from ..core.models import OutboundRequest
from .credentials import mask_api_key

logger = logging.getLogger(__name__)


class ProxyClient:
    """
    Client HTTP vers l'API Gemini.

    Gère:
    - Le pool de connexions partagé
    - Les timeouts (connexion bornée, lecture libre par défaut)
    - La conversion des erreurs réseau en UpstreamConnectionError
    """

    def __init__(
        self,
        settings: ProxySettings,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.settings = settings
        self.transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "ProxyClient":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def start(self) -> None:
        """Ouvre le client sous-jacent."""
        if self._client is not None:
            return
        timeout = httpx.Timeout(
            self.settings.read_timeout,
            connect=self.settings.connect_timeout
        )
        self._client = httpx.AsyncClient(
            timeout=timeout,
            limits=httpx.Limits(
                max_keepalive_connections=self.settings.max_keepalive_connections,
                max_connections=self.settings.max_connections
            ),
            transport=self.transport,
        )

    async def aclose(self) -> None:
        """Ferme le client et ses connexions."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("ProxyClient non démarré")
        return self._client

    def build_request(self, outbound: OutboundRequest) -> httpx.Request:
        """
        Construit la requête HTTPX.

        Le body n'est joint que pour POST, PUT et PATCH. Les valeurs de
        headers partent en octets latin-1, tels que reçus par le serveur
        ASGI: HTTPX refuserait un `str` non ASCII. La réponse est demandée
        sans compression pour être relayée octet pour octet.
        """
        content = outbound.content if outbound.method in BODY_METHODS else None
        headers = [
            (name.encode("latin-1"), value.encode("latin-1"))
            for name, value in outbound.headers.items()
        ]
        headers.append((b"Accept-Encoding", b"identity"))
        return self.client.build_request(
            outbound.method,
            outbound.url,
            headers=headers,
            content=content
        )

    async def send_streaming(self, outbound: OutboundRequest) -> httpx.Response:
        """
        Envoie la requête en mode streaming.

        Tous les status HTTP sont acceptés: le status upstream est relayé tel quel.
        L'appelant doit fermer la réponse (`aclose`).

        Raises:
            UpstreamConnectionError: Si aucune réponse HTTP valide n'est obtenue
        """
        request = self.build_request(outbound)
        try:
            return await self.client.send(request, stream=True)
        except httpx.RequestError as e:
            safe_url = str(request.url.copy_remove_param("key"))
            logger.error(
                "[CLIENT] Échec de connexion à l'upstream (%s, clé %s): %s",
                safe_url, mask_api_key(request.url.params.get("key")), e
            )
            raise UpstreamConnectionError(reason=str(e) or type(e).__name__, url=safe_url) from e


def create_proxy_client(
    settings: ProxySettings,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> ProxyClient:
    """
    Crée un client proxy.

    Args:
        settings: Configuration (timeouts, limites de connexions)
        transport: Transport HTTPX alternatif (tests)

    Returns:
        Instance de ProxyClient (à démarrer avec `start()`)
    """
    return ProxyClient(settings=settings, transport=transport)
