"""
Tests pour les enveloppes d'erreurs de l'API.

Ce module teste la mise en forme standardisée des erreurs et la projection des catégories
d'erreurs du workflow sur les codes HTTP.
"""

from __future__ import annotations

import json

from fastapi import FastAPI, HTTPException
from fastapi.testclient import TestClient

from homepage_cms.apigw.errors import (
    STATUS_BY_KIND,
    create_error_response,
    register_error_handlers,
)
from homepage_cms.core.http_constants import (
    HTTP_CONFLICT,
    HTTP_INTERNAL_SERVER_ERROR,
    HTTP_NOT_FOUND,
    HTTP_UNAUTHORIZED,
    HTTP_UNPROCESSABLE_ENTITY,
)
from homepage_cms.domain.errors import (
    ContentConflictError,
    ContentNotFoundError,
    ContentPersistenceError,
    ContentValidationError,
    ErrorKind,
)


def _app() -> TestClient:
    app = FastAPI()
    register_error_handlers(app)

    @app.get("/validation")
    def validation():
        raise ContentValidationError("The key field is required.")

    @app.get("/missing")
    def missing():
        raise ContentNotFoundError("Content 1 not found.")

    @app.get("/conflict")
    def conflict():
        raise ContentConflictError("Content is already archived.")

    @app.get("/store")
    def store():
        raise ContentPersistenceError("The content store rejected the operation.")

    @app.get("/http")
    def http():
        raise HTTPException(status_code=HTTP_UNAUTHORIZED, detail="missing_token")

    @app.get("/boom")
    def boom():
        raise RuntimeError("boom")

    @app.get("/typed/{item_id}")
    def typed(item_id: int):
        return {"item_id": item_id}

    return TestClient(app, raise_server_exceptions=False)


class TestErrorEnvelope:
    """Enveloppe `{success: false, message, code, trace_id}`."""

    def test_create_error_response(self) -> None:
        response = create_error_response(
            status_code=HTTP_CONFLICT,
            code="CONFLICT",
            message="nope",
            trace_id="trace-1",
            details={"field": "value"},
        )
        assert response.status_code == HTTP_CONFLICT
        body = json.loads(response.body)
        assert body == {
            "success": False,
            "message": "nope",
            "code": "CONFLICT",
            "trace_id": "trace-1",
            "details": {"field": "value"},
        }

    def test_create_error_response_without_details(self) -> None:
        body = json.loads(create_error_response(500, "INTERNAL_ERROR", "x").body)
        assert "details" not in body
        assert body["trace_id"] is None


class TestErrorKinds:
    """Chaque catégorie d'erreur a son propre code HTTP."""

    def test_status_mapping_is_distinct(self) -> None:
        assert STATUS_BY_KIND[ErrorKind.VALIDATION] == HTTP_UNPROCESSABLE_ENTITY
        assert STATUS_BY_KIND[ErrorKind.NOT_FOUND] == HTTP_NOT_FOUND
        assert STATUS_BY_KIND[ErrorKind.CONFLICT] == HTTP_CONFLICT
        assert STATUS_BY_KIND[ErrorKind.PERSISTENCE] == HTTP_INTERNAL_SERVER_ERROR
        assert len(set(STATUS_BY_KIND.values())) == len(ErrorKind)

    def test_handlers(self) -> None:
        client = _app()
        cases = [
            ("/validation", HTTP_UNPROCESSABLE_ENTITY, "VALIDATION_ERROR"),
            ("/missing", HTTP_NOT_FOUND, "NOT_FOUND"),
            ("/conflict", HTTP_CONFLICT, "CONFLICT"),
            ("/store", HTTP_INTERNAL_SERVER_ERROR, "PERSISTENCE_ERROR"),
            ("/http", HTTP_UNAUTHORIZED, "UNAUTHORIZED"),
            ("/boom", HTTP_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR"),
        ]
        for path, status, code in cases:
            r = client.get(path, headers={"X-Request-ID": "t-42"})
            assert r.status_code == status, path
            body = r.json()
            assert body["success"] is False
            assert body["code"] == code
            assert body["trace_id"] == "t-42"

    def test_unexpected_error_hides_details(self) -> None:
        r = _app().get("/boom")
        assert r.json()["message"] == "An unexpected error occurred"

    def test_request_validation_error(self) -> None:
        r = _app().get("/typed/abc")
        assert r.status_code == HTTP_UNPROCESSABLE_ENTITY
        body = r.json()
        assert body["code"] == "VALIDATION_ERROR"
        assert body["message"].startswith("path.item_id")
        assert body["details"]["errors"][0]["loc"] == ["path", "item_id"]
