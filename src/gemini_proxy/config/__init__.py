"""
Configuration de Gemini API Proxy.
"""

from .loader import load_config, load_settings, apply_env_overrides
from .settings import ProxySettings

__all__ = [
    "load_config",
    "load_settings",
    "apply_env_overrides",
    "ProxySettings",
]
