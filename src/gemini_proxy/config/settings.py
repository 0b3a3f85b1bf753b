"""
Dataclasses pour la configuration.
"""
from dataclasses import dataclass, replace
from typing import Dict, Any, Optional

from ..core.constants import (
    UPSTREAM_HOST,
    DEFAULT_API_VERSION,
    DEFAULT_USER_AGENT,
    DEFAULT_PORT,
    MAX_BODY_BYTES,
)
from ..core.exceptions import ConfigurationError
from ..core.models import ApiVersion


def _parse_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _parse_timeout(value: Any) -> Optional[float]:
    if value is None or value == "" or value == "none":
        return None
    return float(value)


@dataclass(frozen=True)
class ProxySettings:
    """
    Configuration immuable du proxy.

    Construite une fois au démarrage, stockée dans `app.state.settings`
    et passée explicitement aux composants du pipeline.
    """
    upstream_host: str = UPSTREAM_HOST
    default_api_version: ApiVersion = ApiVersion(DEFAULT_API_VERSION)
    user_agent: str = DEFAULT_USER_AGENT
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    max_body_bytes: int = MAX_BODY_BYTES
    connect_timeout: float = 10.0
    # None: pas de timeout de lecture, les streams SSE peuvent durer
    read_timeout: Optional[float] = None
    max_connections: int = 100
    max_keepalive_connections: int = 20

    def __post_init__(self):
        if not self.upstream_host.startswith("https://"):
            raise ConfigurationError(
                message=f"L'upstream doit être en HTTPS: {self.upstream_host}",
                config_key="upstream.host"
            )
        if self.upstream_host.endswith("/"):
            object.__setattr__(self, "upstream_host", self.upstream_host.rstrip("/"))
        if not isinstance(self.default_api_version, ApiVersion):
            try:
                version = ApiVersion(self.default_api_version)
            except ValueError:
                raise ConfigurationError(
                    message=f"Version d'API inconnue: {self.default_api_version}",
                    config_key="upstream.default_api_version"
                )
            object.__setattr__(self, "default_api_version", version)
        if self.max_body_bytes <= 0:
            raise ConfigurationError(
                message="max_body_bytes doit être positif",
                config_key="server.max_body_bytes"
            )

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "ProxySettings":
        """
        Crée une instance depuis la configuration chargée (sections TOML).

        Args:
            config: Dictionnaire avec les sections `server`, `upstream`, `debug`

        Returns:
            Instance de ProxySettings
        """
        server = config.get("server", {})
        upstream = config.get("upstream", {})
        defaults = cls()

        try:
            return cls(
                upstream_host=upstream.get("host", defaults.upstream_host),
                default_api_version=upstream.get(
                    "default_api_version", defaults.default_api_version
                ),
                user_agent=upstream.get("user_agent", defaults.user_agent),
                debug=_parse_bool(config.get("debug", {}).get("enabled", defaults.debug)),
                host=server.get("host", defaults.host),
                port=int(server.get("port", defaults.port)),
                max_body_bytes=int(server.get("max_body_bytes", defaults.max_body_bytes)),
                connect_timeout=float(upstream.get("connect_timeout", defaults.connect_timeout)),
                read_timeout=_parse_timeout(upstream.get("read_timeout", defaults.read_timeout)),
                max_connections=int(upstream.get("max_connections", defaults.max_connections)),
                max_keepalive_connections=int(
                    upstream.get("max_keepalive_connections", defaults.max_keepalive_connections)
                ),
            )
        except (TypeError, ValueError) as e:
            raise ConfigurationError(message=f"Valeur de configuration invalide: {e}")

    def with_overrides(self, **overrides: Any) -> "ProxySettings":
        """Copie avec les valeurs non-None de `overrides`."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes) if changes else self
