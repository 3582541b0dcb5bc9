"""
Endpoint de santé pour vérifier la disponibilité de l'API et de la base de données.

Expose `/health` pour signaler l'état général de l'application et du stockage relationnel.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from homepage_cms.api.deps import get_container
from homepage_cms.core.container import Container
from homepage_cms.core.http_constants import HTTP_OK, HTTP_SERVICE_UNAVAILABLE

router = APIRouter(tags=["health"])


@router.get("/health")
def health(container: Container = Depends(get_container)):
    """Vérifie la disponibilité de l'API et répond 503 si la base est injoignable."""
    try:
        with container.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError:
        database = "unavailable"
    status_code = HTTP_OK if database == "ok" else HTTP_SERVICE_UNAVAILABLE
    return JSONResponse(
        status_code=status_code,
        content={
            "status": "ok" if database == "ok" else "degraded",
            "database": database,
            "storage": container.storage_backend,
        },
    )
