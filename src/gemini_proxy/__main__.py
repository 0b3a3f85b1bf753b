"""
Point d'entrée pour `python -m gemini_proxy`.
"""
import argparse
import os
import logging

import uvicorn

from .config.loader import CONFIG_PATH_ENV, load_settings
from .main import create_app


def main():
    """Fonction principale."""
    parser = argparse.ArgumentParser(description="Gemini API Proxy")
    parser.add_argument("--host", default=None, help="Host (défaut: 0.0.0.0 ou $HOST)")
    parser.add_argument("--port", type=int, default=None, help="Port (défaut: 3000 ou $PORT)")
    parser.add_argument("--config", default=None, help="Fichier de configuration TOML")
    parser.add_argument("--debug", action="store_true", default=None, help="Logs de debug")
    parser.add_argument("--reload", action="store_true", help="Activer le reload auto")

    args = parser.parse_args()

    settings = load_settings(args.config).with_overrides(
        host=args.host, port=args.port, debug=args.debug
    )

    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    print(f"🚀 Gemini Proxy sur {settings.host}:{settings.port}")
    print(f"🌐 Upstream: {settings.upstream_host}")

    if args.reload:
        # Le reload réimporte l'app: la config est relue depuis l'environnement
        if args.config:
            os.environ[CONFIG_PATH_ENV] = args.config
        uvicorn.run(
            "gemini_proxy.main:create_app",
            factory=True,
            host=settings.host,
            port=settings.port,
            reload=True
        )
        return

    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level="debug" if settings.debug else "info"
    )


if __name__ == "__main__":
    main()
