"""
Application principale FastAPI.

Ce module assemble tous les composants de l'application : middlewares, gestion des erreurs,
routes de contenus, santé et métriques.

Responsabilités du module:
- Initialiser le logging structuré
- Construire l'application FastAPI avec son titre/debug
- Ajouter les middlewares (request id, timing, Prometheus)
- Brancher les handlers d'erreurs et monter les routers
"""

from __future__ import annotations

from fastapi import FastAPI

from homepage_cms.api.routes_content import public_router as public_content_router
from homepage_cms.api.routes_content import router as content_router
from homepage_cms.api.routes_health import router as health_router
from homepage_cms.apigw.errors import register_error_handlers
from homepage_cms.app.metrics import PrometheusMiddleware, metrics_router
from homepage_cms.core.container import Container
from homepage_cms.core.logging import setup_logging
from homepage_cms.middlewares.request_id import RequestIDMiddleware
from homepage_cms.middlewares.timing import TimingMiddleware


def create_app(container: Container | None = None) -> FastAPI:
    """
    Construit et retourne l'application FastAPI prête à l'usage.

    Étapes:
    - Configure le logging structuré (structlog)
    - Rattache le conteneur (settings, base, service) à `app.state`
    - Ajoute les middlewares utiles au debug/traçabilité
    - Publie les routes d'administration, de lecture publique, de santé et de métriques
    """
    setup_logging()
    if container is None:
        from homepage_cms.core.container import container as default_container  # noqa: PLC0415

        container = default_container
    settings = container.settings
    app = FastAPI(title=settings.APP_NAME, debug=settings.APP_DEBUG)
    app.state.container = container
    app.state.settings = settings
    register_error_handlers(app)
    app.add_middleware(PrometheusMiddleware)
    app.add_middleware(TimingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.include_router(health_router)
    app.include_router(content_router)
    app.include_router(public_content_router)
    app.include_router(metrics_router)
    return app


app = create_app()
