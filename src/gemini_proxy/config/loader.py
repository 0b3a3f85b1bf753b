"""gemini_proxy.config.loader

Chargement de la configuration TOML et des surcharges d'environnement.

Le fichier est optionnel: sans `config.toml`, les valeurs par défaut
de `ProxySettings` s'appliquent.
"""
import os
import re
from pathlib import Path
from typing import Dict, Any, Mapping, Optional

from ..core.exceptions import ConfigurationError
from .settings import ProxySettings

CONFIG_PATH_ENV = "GEMINI_PROXY_CONFIG"


def _expand_env_vars(obj: Any) -> Any:
    """
    Récursivement étend les variables d'environnement ${VAR} dans la config.

    Args:
        obj: Valeur à traiter (str, dict, list)

    Returns:
        Valeur avec variables d'environnement expansées
    """
    if isinstance(obj, str):
        def replace_env_var(match):
            var_name = match.group(1)
            return os.environ.get(var_name, match.group(0))
        return re.sub(r'\$\{([^}]+)\}', replace_env_var, obj)
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(item) for item in obj]
    return obj


def _default_config_path() -> Path:
    # Structure: project/src/gemini_proxy/config/loader.py
    return Path(__file__).resolve().parents[3] / "config.toml"


def load_config(config_path: str = None) -> Dict[str, Any]:
    """
    Charge la configuration depuis un fichier TOML.

    Args:
        config_path: Chemin vers le fichier (optionnel, sinon
            $GEMINI_PROXY_CONFIG puis config.toml à la racine du projet)

    Returns:
        Dictionnaire de configuration (vide si aucun fichier par défaut)

    Raises:
        ConfigurationError: Si un fichier explicite n'existe pas ou est invalide
    """
    explicit = config_path or os.environ.get(CONFIG_PATH_ENV)
    path = Path(explicit) if explicit else _default_config_path()

    if not path.exists():
        if explicit:
            raise ConfigurationError(
                message=f"Fichier de configuration non trouvé: {path}",
                config_key="config_path"
            )
        return {}

    try:
        import tomllib
    except ImportError:
        import tomli as tomllib

    try:
        with open(path, "rb") as f:
            raw_config = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(
            message=f"Fichier de configuration invalide ({path}): {e}",
            config_key="config_path"
        )

    return _expand_env_vars(raw_config)


def apply_env_overrides(
    config: Dict[str, Any],
    environ: Optional[Mapping[str, str]] = None
) -> Dict[str, Any]:
    """
    Applique PORT, HOST, DEBUG et GEMINI_PROXY_UPSTREAM sur une copie de la config.
    """
    env = os.environ if environ is None else environ
    merged = {section: dict(values) for section, values in config.items() if isinstance(values, dict)}

    server = merged.setdefault("server", {})
    if env.get("PORT"):
        server["port"] = env["PORT"]
    if env.get("HOST"):
        server["host"] = env["HOST"]

    if env.get("DEBUG"):
        merged.setdefault("debug", {})["enabled"] = env["DEBUG"] == "true"

    if env.get("GEMINI_PROXY_UPSTREAM"):
        merged.setdefault("upstream", {})["host"] = env["GEMINI_PROXY_UPSTREAM"]

    return merged


def load_settings(
    config_path: str = None,
    environ: Optional[Mapping[str, str]] = None
) -> ProxySettings:
    """
    Construit les settings: fichier TOML, puis surcharges d'environnement.

    Returns:
        Instance immuable de ProxySettings
    """
    config = apply_env_overrides(load_config(config_path), environ)
    return ProxySettings.from_config(config)
