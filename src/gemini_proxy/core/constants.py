"""
Constantes globales pour Gemini API Proxy.
"""

# ============================================================================
# UPSTREAM
# ============================================================================
UPSTREAM_HOST = "https://generativelanguage.googleapis.com"
DEFAULT_API_VERSION = "v1beta"
DEFAULT_USER_AGENT = "Gemini-API-Proxy/Python"
DEFAULT_PORT = 3000

# Limite du body entrant (50 Mo)
MAX_BODY_BYTES = 50 * 1024 * 1024

# ============================================================================
# CLÉ API
# ============================================================================
API_KEY_HEADER = "x-goog-api-key"

# Ordre de priorité des paramètres de query portant la clé
API_KEY_QUERY_PARAMS = ("key", "api_key", "apikey", "token", "access_token")

# Paramètres retirés de la query avant réinjection de `key`
STRIPPED_QUERY_PARAMS = API_KEY_QUERY_PARAMS + ("debug",)

# ============================================================================
# COMPATIBILITÉ DE VERSION
# ============================================================================
# Champs non supportés par v1
RESTRICTED_FIELDS = ("systemInstruction", "tool_config", "tool_calls")

VERSION_PATH_PREFIXES = ("/v1/", "/v1beta/")

# ============================================================================
# HEADERS
# ============================================================================
# Headers entrants jamais transmis à l'upstream
SKIPPED_REQUEST_HEADERS = frozenset({
    "host",
    "connection",
    "content-length",
    "transfer-encoding",
    API_KEY_HEADER,
    "authorization",
    "x-api-key",
    "api-key",
    "accept-encoding",
})

# Headers de réponse upstream relayés au client
SAFE_RESPONSE_HEADERS = frozenset({
    "content-type",
    "content-encoding",
    "cache-control",
    "expires",
    "last-modified",
    "etag",
    "vary",
    "x-goog-generation",
    "x-goog-metageneration",
})
VENDOR_HEADER_PREFIX = "x-goog-"

# Méthodes dont le body est transmis
BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})

# ============================================================================
# CORS & MÉTADONNÉES
# ============================================================================
CORS_ALLOW_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"]
CORS_ALLOW_HEADERS = [
    "Content-Type", "Authorization", "X-API-Key", "X-Requested-With", "User-Agent",
    "Accept", "Origin", "Cache-Control", "X-Request-ID", "X-Goog-Api-Key",
    "X-Session-Token", "X-Client-Version", "X-Device-Id",
]
CORS_MAX_AGE = 86400

REQUEST_ID_HEADER = "X-Request-ID"
PROXY_REQUEST_ID_HEADER = "X-Proxy-Request-ID"
RESPONSE_TIME_HEADER = "X-Response-Time"

# ============================================================================
# DEBUG
# ============================================================================
DEBUG_QUERY_PARAM = "debug"
DEBUG_HEADER = "http-debug"

FAVICON_PATH = "/favicon.ico"
