"""
Objets de requête du pipeline proxy.

Tous ont la durée de vie d'une seule requête.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class ApiVersion(str, Enum):
    """Surface de l'API upstream ciblée par une requête."""
    V1 = "v1"
    V1BETA = "v1beta"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class InboundRequest:
    """
    Requête reçue du client.

    `path` est le chemin tel qu'envoyé (encodage `%XX` conservé).
    `headers` a des clés en minuscules. `body` est la valeur JSON décodée,
    les octets bruts si le payload n'est pas du JSON, ou None si vide.
    `raw_body` garde les octets reçus.
    """
    method: str
    path: str
    query: Dict[str, str] = field(default_factory=dict)
    headers: Dict[str, str] = field(default_factory=dict)
    body: Any = None
    raw_body: Optional[bytes] = None

    @classmethod
    def create(
        cls,
        method: str,
        path: str,
        query: Optional[Dict[str, str]] = None,
        headers: Optional[Dict[str, str]] = None,
        body: Any = None,
        raw_body: Optional[bytes] = None
    ) -> "InboundRequest":
        """Normalise la méthode et les noms de headers."""
        return cls(
            method=method.upper(),
            path=path,
            query=dict(query or {}),
            headers={k.lower(): v for k, v in (headers or {}).items()},
            body=body,
            raw_body=raw_body,
        )


@dataclass(frozen=True)
class OutboundRequest:
    """Requête entièrement résolue à envoyer à l'upstream."""
    method: str
    url: str
    headers: Dict[str, str]
    version: ApiVersion
    content: Optional[bytes] = None
