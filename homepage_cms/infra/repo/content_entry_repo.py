# ============================================================
# Module : homepage_cms/infra/repo/content_entry_repo.py
# Objet  : Accès SQL aux entrées de contenu, filtré par tenant.
# ============================================================

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC

from sqlalchemy import select
from sqlalchemy.orm import Session

from ...domain.content import Audience, ContentEntry, ContentStatus
from .models import ContentEntryORM


def _iso(value) -> str | None:
    if not value:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.isoformat()


def entry_to_domain(row: ContentEntryORM) -> ContentEntry:
    """Convertit une ligne ORM en `ContentEntry`."""
    return ContentEntry(
        id=row.id,
        tenant_id=row.tenant_id,
        section=row.section,
        audience=Audience(row.audience),
        key=row.key,
        value=row.value,
        metadata=dict(row.meta or {}),
        status=ContentStatus(row.status),
        created_by=row.created_by,
        updated_by=row.updated_by,
        approved_by=row.approved_by,
        approved_at=_iso(row.approved_at),
        published_at=_iso(row.published_at),
        created_at=_iso(row.created_at) or "",
        updated_at=_iso(row.updated_at) or "",
    )


class ContentEntryRepo:
    """Lecture/écriture des entrées. Toutes les requêtes sont bornées à un tenant."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, tenant_id: str, content_id: int, lock: bool = False) -> ContentEntryORM | None:
        """Retourne l'entrée `content_id` du tenant, verrouillée si `lock`."""
        stmt = select(ContentEntryORM).where(
            ContentEntryORM.id == content_id, ContentEntryORM.tenant_id == tenant_id
        )
        if lock:
            stmt = stmt.with_for_update()
        return self._session.execute(stmt).scalars().first()

    def find_by_slot(
        self, tenant_id: str, section: str, audience: str, key: str, lock: bool = False
    ) -> ContentEntryORM | None:
        """Retourne l'entrée occupant l'emplacement (section, audience, clé)."""
        stmt = select(ContentEntryORM).where(
            ContentEntryORM.tenant_id == tenant_id,
            ContentEntryORM.section == section,
            ContentEntryORM.audience == audience,
            ContentEntryORM.key == key,
        )
        if lock:
            stmt = stmt.with_for_update()
        return self._session.execute(stmt).scalars().first()

    def add(self, row: ContentEntryORM) -> ContentEntryORM:
        """Insère une entrée. Lève IntegrityError si l'emplacement est déjà occupé."""
        self._session.add(row)
        self._session.flush()
        return row

    def list_entries(
        self,
        tenant_id: str,
        section: str | None = None,
        audience: str | None = None,
        status: str | None = None,
        include_archived: bool = False,
    ) -> list[ContentEntryORM]:
        """Liste les entrées du tenant triées par section puis clé."""
        stmt = select(ContentEntryORM).where(ContentEntryORM.tenant_id == tenant_id)
        if section:
            stmt = stmt.where(ContentEntryORM.section == section)
        if audience:
            stmt = stmt.where(ContentEntryORM.audience == audience)
        if status:
            stmt = stmt.where(ContentEntryORM.status == status)
        elif not include_archived:
            stmt = stmt.where(ContentEntryORM.status != ContentStatus.ARCHIVED.value)
        stmt = stmt.order_by(
            ContentEntryORM.section, ContentEntryORM.key, ContentEntryORM.audience
        )
        return list(self._session.execute(stmt).scalars().all())

    def list_by_status(
        self,
        tenant_id: str,
        statuses: Iterable[str],
        audiences: Iterable[str],
        section: str | None = None,
    ) -> list[ContentEntryORM]:
        """Liste les entrées d'un ensemble de statuts pour un ensemble d'audiences."""
        stmt = select(ContentEntryORM).where(
            ContentEntryORM.tenant_id == tenant_id,
            ContentEntryORM.status.in_(list(statuses)),
            ContentEntryORM.audience.in_(list(audiences)),
        )
        if section:
            stmt = stmt.where(ContentEntryORM.section == section)
        stmt = stmt.order_by(ContentEntryORM.section, ContentEntryORM.key)
        return list(self._session.execute(stmt).scalars().all())
