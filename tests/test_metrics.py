"""Tests pour les métriques Prometheus.

Ce module teste que les métriques HTTP et les compteurs du workflow sont exposés via /metrics, et
que les labels tenant restent bornés par la liste blanche.
"""

from prometheus_client import REGISTRY

from homepage_cms.app.metrics import labelize_tenant
from homepage_cms.core.http_constants import HTTP_OK
from homepage_cms.domain.content import ActorContext


def test_metrics_exposed(client):
    """Teste que l'endpoint /metrics expose les métriques Prometheus."""
    client.get("/health")
    r = client.get("/metrics")
    assert r.status_code == HTTP_OK
    assert b"http_requests_total" in r.content
    assert b"content_workflow_transitions_total" in r.content


def test_route_label_uses_template(client, editor_headers):
    """Teste que le label de route est le gabarit et non le chemin concret."""
    client.get("/admin/content/12345", headers=editor_headers)
    r = client.get("/metrics")
    assert b'route="/admin/content/{content_id}"' in r.content
    assert b"/admin/content/12345" not in r.content


def test_transitions_counted(service):
    """Teste que chaque opération appliquée incrémente le compteur de transitions."""
    actor = ActorContext(user_id="u1", tenant_id="metrics-tenant")
    labels = {"operation": "update", "tenant": "metrics-tenant"}
    before = REGISTRY.get_sample_value("content_workflow_transitions_total", labels) or 0.0
    service.update_content(actor, "hero", "headline", "x", "both")
    assert REGISTRY.get_sample_value("content_workflow_transitions_total", labels) == before + 1


def test_labelize_tenant_whitelist():
    """Teste que les labels de tenant sont filtrés selon la whitelist."""
    allowed = ["t1", "t2", "default"]
    assert labelize_tenant("t1", allowed) == "t1"
    assert labelize_tenant("nope", allowed) == "unknown"
    assert labelize_tenant("", allowed) == "unknown"
    assert labelize_tenant("t2", "t1, t2") == "t2"
    assert labelize_tenant("anything", None) == "anything"
