# ============================================================
# Module : homepage_cms/infra/repo/content_version_repo.py
# Objet  : Accès SQL au registre append-only des versions.
# Notes  : numérotation séquentielle 1..N par entrée.
# ============================================================

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...domain.content import ContentVersion
from .models import ContentEntryORM, ContentVersionORM, utcnow


def _iso(value) -> str:
    if not value:
        return ""
    # SQLite relit les dates sans fuseau ; elles sont stockées en UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.isoformat()


def version_to_domain(row: ContentVersionORM) -> ContentVersion:
    """Convertit une ligne ORM en `ContentVersion`."""
    return ContentVersion(
        id=row.id,
        content_id=row.content_id,
        version_number=row.version_number,
        value=row.value,
        metadata=dict(row.meta or {}),
        change_notes=row.change_notes,
        created_by=row.created_by,
        created_at=_iso(row.created_at),
    )


class ContentVersionRepo:
    """Registre des versions : ajout et lecture uniquement, jamais de mise à jour."""

    def __init__(self, session: Session) -> None:
        """Construit le repo avec une session (SQLAlchemy)."""
        self._session = session

    def next_number(self, content_id: int) -> int:
        """Numéro de la prochaine version (max + 1, 1 pour une entrée neuve).

        À appeler dans la transaction qui a verrouillé la ligne de l'entrée.
        """
        stmt = select(func.max(ContentVersionORM.version_number)).where(
            ContentVersionORM.content_id == content_id
        )
        current = self._session.execute(stmt).scalar()
        return (current or 0) + 1

    def append(
        self,
        entry: ContentEntryORM,
        value: str,
        metadata: dict[str, Any],
        change_notes: str | None,
        author: str,
        created_at: datetime | None = None,
    ) -> ContentVersion:
        """Ajoute une version pour `entry`. Lève IntegrityError sur doublon de numéro.

        Contrainte d'unicité: (content_id, version_number).
        """
        row = ContentVersionORM(
            content_id=entry.id,
            tenant_id=entry.tenant_id,
            version_number=self.next_number(entry.id),
            value=value,
            meta=dict(metadata),
            change_notes=change_notes,
            created_by=author,
            created_at=created_at or utcnow(),
        )
        self._session.add(row)
        try:
            self._session.flush()
        except IntegrityError:
            self._session.rollback()
            raise
        return version_to_domain(row)

    def get(self, content_id: int, version_number: int) -> ContentVersion | None:
        """Retourne une version précise d'une entrée."""
        stmt = select(ContentVersionORM).where(
            ContentVersionORM.content_id == content_id,
            ContentVersionORM.version_number == version_number,
        )
        row = self._session.execute(stmt).scalars().first()
        return version_to_domain(row) if row else None

    def list_for_content(self, content_id: int) -> list[ContentVersion]:
        """Historique complet d'une entrée, du plus récent au plus ancien."""
        stmt = (
            select(ContentVersionORM)
            .where(ContentVersionORM.content_id == content_id)
            .order_by(ContentVersionORM.version_number.desc())
        )
        rows = self._session.execute(stmt).scalars().all()
        return [version_to_domain(r) for r in rows]
