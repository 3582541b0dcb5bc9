"""Configuration de test pour pytest avec gestion des chemins et fixtures partagées.

Ce module ajoute la racine du projet au sys.path et fournit une base SQLite en mémoire par test,
une horloge déterministe, le service de workflow et un client HTTP authentifié.
"""

import os
import sys
from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient

# Ensure project root is on sys.path so that
# imports like `from homepage_cms...` and `from scripts...` resolve.
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from homepage_cms.app.main import create_app  # noqa: E402
from homepage_cms.core.container import Container  # noqa: E402
from homepage_cms.core.settings import Settings  # noqa: E402
from homepage_cms.domain.auth import create_access_token  # noqa: E402
from homepage_cms.domain.content import ActorContext  # noqa: E402
from homepage_cms.infra.repo.db import (  # noqa: E402
    create_schema,
    get_engine,
    get_session_factory,
)
from homepage_cms.services.content_workflow import ContentWorkflowService  # noqa: E402

TEST_SECRET = "test-secret"
TEST_DB_URL = "sqlite+pysqlite:///:memory:"


class StepClock:
    """Horloge de test : avance d'une seconde à chaque appel."""

    def __init__(self) -> None:
        self.current = datetime(2026, 1, 1, 9, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


@pytest.fixture
def engine():
    eng = get_engine(TEST_DB_URL)
    create_schema(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return get_session_factory(engine)


@pytest.fixture
def service(session_factory) -> ContentWorkflowService:
    """Service de workflow sur une base vierge, avec horloge déterministe."""
    return ContentWorkflowService(session_factory, now=StepClock(), bulk_max_items=10)


@pytest.fixture
def editor() -> ActorContext:
    return ActorContext(user_id="editor-1", tenant_id="acme")


@pytest.fixture
def reviewer() -> ActorContext:
    return ActorContext(user_id="reviewer-1", tenant_id="acme")


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        DATABASE_URL=TEST_DB_URL,
        JWT_SECRET=TEST_SECRET,
        AUTO_CREATE_SCHEMA=True,
        APP_DEBUG=False,
    )


@pytest.fixture
def container(settings) -> Container:
    return Container(settings)


@pytest.fixture
def client(container) -> TestClient:
    return TestClient(create_app(container), raise_server_exceptions=False)


@pytest.fixture
def make_headers(settings):
    """Fabrique des en-têtes Authorization pour un utilisateur, un tenant et des rôles."""

    def _make(sub: str = "editor-1", tenant: str | None = "acme", roles=None) -> dict[str, str]:
        payload = {"sub": sub, "roles": list(roles if roles is not None else ["content_admin"])}
        if tenant is not None:
            payload["tenant"] = tenant
        token = create_access_token(
            secret=settings.JWT_SECRET,
            alg=settings.JWT_ALG,
            expires_min=5,
            payload=payload,
        )
        return {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture
def editor_headers(make_headers) -> dict[str, str]:
    return make_headers("editor-1", roles=["content_admin"])


@pytest.fixture
def approver_headers(make_headers) -> dict[str, str]:
    return make_headers("reviewer-1", roles=["content_approver"])
