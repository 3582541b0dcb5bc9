"""
Métriques Prometheus pour l'application.

Ce module définit les métriques HTTP et les compteurs de transitions du workflow de contenus,
ainsi que l'endpoint `/metrics`.
"""

import time

from fastapi import APIRouter, Request
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Histogram,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

metrics_router = APIRouter()

REQUEST_COUNT = Counter(
    "http_requests_total", "Total HTTP requests", ["method", "route", "status"]
)
REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds", "Latency of HTTP requests", ["route"]
)

# Workflow metrics
CONTENT_TRANSITIONS = Counter(
    "content_workflow_transitions_total",
    "Total content workflow operations applied",
    ["operation", "tenant"],
)
CONTENT_ERRORS = Counter(
    "content_workflow_errors_total",
    "Total content workflow errors by kind",
    ["kind", "tenant"],
)


def _normalize_allowed(allowed: list[str] | str | None) -> list[str]:
    """Normalize allowed values from settings (list or CSV string)."""
    if not allowed:
        return []
    if isinstance(allowed, list):
        if len(allowed) == 1 and "," in (allowed[0] or ""):
            return [s.strip() for s in allowed[0].split(",") if s.strip()]
        return [str(x).strip() for x in allowed if str(x).strip()]
    return [s.strip() for s in str(allowed).split(",") if s.strip()]


def labelize_tenant(tenant: str | None, allowed: list[str] | str | None) -> str:
    """Project tenant label through a whitelist; otherwise 'unknown'."""
    vals = set(_normalize_allowed(allowed))
    if not vals:
        return tenant or "default"
    return (tenant or "").strip() if (tenant or "").strip() in vals else "unknown"


@metrics_router.get("/metrics")
def metrics():
    """
    Expose les métriques Prometheus au format texte.

    Returns:
        Response: Réponse HTTP contenant les métriques au format Prometheus.
    """
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


class PrometheusMiddleware(BaseHTTPMiddleware):
    """
    Middleware Prometheus pour mesurer les métriques HTTP.

    Collecte les métriques de comptage des requêtes et de latence par route. La route est le
    gabarit FastAPI (`/admin/content/{content_id}/approve`) quand il est connu, pour borner la
    cardinalité des labels.
    """

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response: Response = await call_next(request)
        route_obj = request.scope.get("route")
        route = getattr(route_obj, "path", None) or request.scope.get("path", "unknown")
        REQUEST_COUNT.labels(request.method, route, str(response.status_code)).inc()
        REQUEST_LATENCY.labels(route).observe(time.perf_counter() - start)
        return response
