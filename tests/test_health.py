"""Tests pour l'endpoint de santé de l'application."""

from homepage_cms.core.http_constants import HTTP_OK, HTTP_SERVICE_UNAVAILABLE


def test_health(client):
    """Teste que l'endpoint de santé retourne un statut OK avec la base joignable."""
    r = client.get("/health")
    assert r.status_code == HTTP_OK
    assert r.json() == {"status": "ok", "database": "ok", "storage": "sqlite"}


def test_health_degraded_when_database_down(client, container):
    """Teste le 503 quand la base ne répond plus."""
    container.engine.dispose()
    container.engine = _BrokenEngine()
    r = client.get("/health")
    assert r.status_code == HTTP_SERVICE_UNAVAILABLE
    assert r.json()["status"] == "degraded"


class _BrokenEngine:
    def connect(self):
        from sqlalchemy.exc import OperationalError  # noqa: PLC0415

        raise OperationalError("SELECT 1", {}, Exception("down"))
