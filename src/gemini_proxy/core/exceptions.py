"""
Exceptions personnalisées pour Gemini API Proxy.
"""
from typing import Any, Dict


class GeminiProxyError(Exception):
    """Exception de base pour toutes les erreurs du proxy."""

    def __init__(self, message: str, code: str = None, details: dict = None):
        super().__init__(message)
        self.message = message
        self.code = code or "unknown_error"
        self.details = details or {}

    def __str__(self):
        if self.details:
            return f"[{self.code}] {self.message} - Détails: {self.details}"
        return f"[{self.code}] {self.message}"


class ConfigurationError(GeminiProxyError):
    """Erreur de configuration (fichier manquant, valeur invalide)."""

    def __init__(self, message: str, config_key: str = None):
        super().__init__(
            message=message,
            code="config_error",
            details={"key": config_key} if config_key else {}
        )


class ProxyHTTPError(GeminiProxyError):
    """
    Erreur rendue au client dans l'enveloppe d'erreur de l'API Google.

    Sous-classes: fixent `http_status` et `status`.
    """

    http_status: int = 500
    status: str = "INTERNAL"

    def to_envelope(self) -> Dict[str, Any]:
        """Enveloppe `{"error": {"code", "message", "status"}}`."""
        return {
            "error": {
                "code": self.http_status,
                "message": self.message,
                "status": self.status,
            }
        }


class AuthenticationError(ProxyHTTPError):
    """Aucune clé API trouvée dans la requête."""

    http_status = 401
    status = "UNAUTHENTICATED"

    def __init__(self, message: str = "API key not found"):
        super().__init__(message=message, code="auth_error")


class PayloadTooLargeError(ProxyHTTPError):
    """Body entrant au-delà de la limite configurée."""

    http_status = 413
    status = "PAYLOAD_TOO_LARGE"

    def __init__(self, limit: int, message: str = "Request body too large"):
        super().__init__(
            message=message,
            code="payload_too_large",
            details={"limit": limit}
        )


class UpstreamConnectionError(ProxyHTTPError):
    """Impossible de joindre l'upstream (DNS, TCP, TLS)."""

    http_status = 502
    status = "BAD_GATEWAY"

    def __init__(self, reason: str, url: str = None):
        super().__init__(
            message=f"Failed to connect to Google Gemini API: {reason}",
            code="upstream_connection_error",
            details={"url": url} if url else {}
        )
        self.reason = reason


class StreamingError(GeminiProxyError):
    """Erreur lors du relais d'une réponse déjà commencée."""

    def __init__(
        self,
        message: str,
        error_type: str = None,
        chunks_sent: int = 0,
        details: dict = None
    ):
        super().__init__(
            message=message,
            code="streaming_error",
            details={
                "error_type": error_type,
                "chunks_sent": chunks_sent,
                **(details or {})
            }
        )
        self.error_type = error_type
        self.chunks_sent = chunks_sent
