"""
Lance le serveur HTTP (uvicorn) avec l'hôte et le port des settings.

Usage: `python scripts/run_server.py [--reload]`
"""

from __future__ import annotations

import argparse

import uvicorn

from homepage_cms.core.settings import get_settings


def main() -> None:
    """Point d'entrée : démarre `homepage_cms.app.main:app`."""
    parser = argparse.ArgumentParser()
    parser.add_argument("--reload", action="store_true", help="Rechargement automatique (dev)")
    args = parser.parse_args()
    settings = get_settings()
    uvicorn.run(
        "homepage_cms.app.main:app",
        host=settings.APP_HOST,
        port=settings.APP_PORT,
        reload=args.reload,
    )


if __name__ == "__main__":  # pragma: no cover - script entry
    main()
