"""Gestion standardisée des erreurs API avec enveloppes d'erreur.

Toutes les erreurs conservent l'enveloppe historique `{"success": false, "message": "..."}` et
ajoutent `code` et `trace_id`. Les catégories d'erreurs du workflow sont projetées sur des codes
HTTP distincts (422, 404, 409, 500).
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from homepage_cms.app.metrics import CONTENT_ERRORS, labelize_tenant
from homepage_cms.core.http_constants import (
    HTTP_CONFLICT,
    HTTP_INTERNAL_SERVER_ERROR,
    HTTP_NOT_FOUND,
    HTTP_UNPROCESSABLE_ENTITY,
)
from homepage_cms.domain.errors import ContentError, ErrorKind

log = structlog.get_logger(__name__)

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: HTTP_UNPROCESSABLE_ENTITY,
    ErrorKind.NOT_FOUND: HTTP_NOT_FOUND,
    ErrorKind.CONFLICT: HTTP_CONFLICT,
    ErrorKind.PERSISTENCE: HTTP_INTERNAL_SERVER_ERROR,
}

# Map common HTTP status codes to error codes
HTTP_ERROR_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    422: "VALIDATION_ERROR",
    500: "INTERNAL_ERROR",
}


def create_error_response(
    status_code: int,
    code: str,
    message: str,
    trace_id: str | None = None,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    """Create a standardized error response."""
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "message": message,
            "code": code,
            "trace_id": trace_id,
            **({"details": details} if details else {}),
        },
    )


def extract_trace_id(request: Request) -> str | None:
    """Extract trace ID from request headers or request state (set by middleware)."""
    trace_id = request.headers.get("X-Request-ID")
    if trace_id:
        return trace_id
    return getattr(request.state, "request_id", None)


def handle_content_error(request: Request, exc: ContentError) -> JSONResponse:
    """Handle workflow errors: one HTTP status per error kind."""
    status_code = STATUS_BY_KIND.get(exc.kind, HTTP_INTERNAL_SERVER_ERROR)
    tenant = getattr(request.state, "tenant_id", None)
    CONTENT_ERRORS.labels(exc.kind.value, labelize_tenant(tenant, _allowed(request))).inc()
    log.warning(
        "content_error",
        kind=exc.kind.value,
        code=exc.code,
        error_message=exc.message,
        status_code=status_code,
        path=request.url.path,
    )
    return create_error_response(
        status_code=status_code,
        code=exc.code,
        message=exc.message,
        trace_id=extract_trace_id(request),
    )


def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions (FastAPI and Starlette) with standard envelope."""
    code = HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR")
    log.warning(
        "http_exception",
        code=code,
        error_message=str(exc.detail),
        status_code=exc.status_code,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "message": str(exc.detail),
            "code": code,
            "trace_id": extract_trace_id(request),
        },
        headers=getattr(exc, "headers", None),
    )


def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request body/query validation errors (422) with standard envelope."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = f"{field}: {first.get('msg')}" if field else str(first.get("msg", "Invalid request"))
    return create_error_response(
        status_code=HTTP_UNPROCESSABLE_ENTITY,
        code="VALIDATION_ERROR",
        message=message,
        trace_id=extract_trace_id(request),
        details={"errors": [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in errors]},
    )


def handle_generic_exception(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions with standard envelope."""
    log.error(
        "unexpected_error",
        exception_type=type(exc).__name__,
        path=request.url.path,
        exc_info=exc,
    )
    return create_error_response(
        status_code=HTTP_INTERNAL_SERVER_ERROR,
        code="INTERNAL_ERROR",
        message="An unexpected error occurred",
        trace_id=extract_trace_id(request),
    )


def _allowed(request: Request) -> list[str] | None:
    settings = getattr(request.app.state, "settings", None)
    return getattr(settings, "ALLOWED_TENANTS", None)


def register_error_handlers(app: FastAPI) -> None:
    """Branche les handlers d'erreurs sur l'application."""
    app.add_exception_handler(ContentError, handle_content_error)
    app.add_exception_handler(HTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_generic_exception)
