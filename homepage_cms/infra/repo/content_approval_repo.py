# ============================================================
# Module : homepage_cms/infra/repo/content_approval_repo.py
# Objet  : Accès SQL aux demandes d'approbation.
# ============================================================

from __future__ import annotations

from datetime import UTC

from sqlalchemy import select
from sqlalchemy.orm import Session

from ...domain.content import ApprovalStatus, ContentApproval
from .models import ContentApprovalORM


def _iso(value) -> str | None:
    if not value:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.isoformat()


def approval_to_domain(row: ContentApprovalORM) -> ContentApproval:
    """Convertit une ligne ORM en `ContentApproval`."""
    return ContentApproval(
        id=row.id,
        content_id=row.content_id,
        requested_by=row.requested_by,
        status=ApprovalStatus(row.status),
        request_notes=row.request_notes,
        reviewed_by=row.reviewed_by,
        review_notes=row.review_notes,
        requested_at=_iso(row.requested_at) or "",
        reviewed_at=_iso(row.reviewed_at),
    )


class ContentApprovalRepo:
    """Suivi des demandes d'approbation (une seule `pending` par entrée)."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def add(self, row: ContentApprovalORM) -> ContentApprovalORM:
        self._session.add(row)
        self._session.flush()
        return row

    def latest_pending(self, content_id: int) -> ContentApprovalORM | None:
        """Retourne la demande en attente la plus récente d'une entrée."""
        stmt = (
            select(ContentApprovalORM)
            .where(
                ContentApprovalORM.content_id == content_id,
                ContentApprovalORM.status == ApprovalStatus.PENDING.value,
            )
            .order_by(ContentApprovalORM.requested_at.desc(), ContentApprovalORM.id.desc())
            .limit(1)
        )
        return self._session.execute(stmt).scalars().first()

    def list_for_content(self, content_id: int) -> list[ContentApproval]:
        """Historique des demandes d'une entrée, du plus récent au plus ancien."""
        stmt = (
            select(ContentApprovalORM)
            .where(ContentApprovalORM.content_id == content_id)
            .order_by(ContentApprovalORM.id.desc())
        )
        return [approval_to_domain(r) for r in self._session.execute(stmt).scalars().all()]

    def list_pending(self, tenant_id: str) -> list[ContentApproval]:
        """Demandes en attente d'un tenant (file de relecture)."""
        stmt = (
            select(ContentApprovalORM)
            .where(
                ContentApprovalORM.tenant_id == tenant_id,
                ContentApprovalORM.status == ApprovalStatus.PENDING.value,
            )
            .order_by(ContentApprovalORM.requested_at)
        )
        return [approval_to_domain(r) for r in self._session.execute(stmt).scalars().all()]
