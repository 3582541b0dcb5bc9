# ============================================================
# Module : homepage_cms/services/content_workflow.py
# Objet  : Workflow de contenus de la page d'accueil
#          (édition versionnée, approbation, publication).
# Contexte : chaque opération reçoit explicitement l'acteur (utilisateur + tenant)
#            et s'exécute dans une transaction SQLAlchemy unique.
# ============================================================

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from datetime import datetime
from typing import Any

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from homepage_cms.app.metrics import CONTENT_TRANSITIONS, labelize_tenant
from homepage_cms.domain.content import (
    KEY_MAX_LEN,
    SECTION_MAX_LEN,
    SECTION_METADATA_KEYS,
    ActorContext,
    ApprovalStatus,
    Audience,
    BulkItemError,
    BulkUpdateResult,
    ContentApproval,
    ContentEntry,
    ContentStatus,
    ContentVersion,
)
from homepage_cms.domain.errors import (
    ContentConflictError,
    ContentError,
    ContentNotFoundError,
    ContentPersistenceError,
    ContentValidationError,
)
from homepage_cms.infra.repo.content_approval_repo import (
    ContentApprovalRepo,
    approval_to_domain,
)
from homepage_cms.infra.repo.content_entry_repo import ContentEntryRepo, entry_to_domain
from homepage_cms.infra.repo.content_version_repo import ContentVersionRepo
from homepage_cms.infra.repo.db import session_scope
from homepage_cms.infra.repo.models import (
    ContentApprovalORM,
    ContentEntryORM,
    utcnow,
)

EXPORT_FORMAT_VERSION = 1
NO_PENDING_APPROVAL = "No pending approval found for this content"


def parse_audience(value: Any) -> Audience:
    """Convertit une valeur brute en `Audience` ou lève `ContentValidationError`."""
    if isinstance(value, Audience):
        return value
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ContentValidationError("The audience field is required.")
    try:
        return Audience(str(value).strip().lower())
    except ValueError as err:
        allowed = ", ".join(a.value for a in Audience)
        raise ContentValidationError(
            f"The audience must be one of: {allowed}."
        ) from err


def _required_text(name: str, value: Any, max_len: int | None = None) -> str:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ContentValidationError(f"The {name} field is required.")
    if not isinstance(value, str):
        raise ContentValidationError(f"The {name} field must be a string.")
    text = value.strip() if max_len is not None else value
    if max_len is not None and len(text) > max_len:
        raise ContentValidationError(
            f"The {name} field must not be greater than {max_len} characters."
        )
    return text


def validate_content_input(
    section: Any, key: Any, value: Any, audience: Any, metadata: Any = None
) -> tuple[str, str, str, Audience, dict[str, Any] | None]:
    """Valide une modification de contenu et retourne les champs normalisés.

    `metadata` vaut None quand il n'est pas fourni (les métadonnées existantes sont conservées).
    """
    section_ = _required_text("section", section, SECTION_MAX_LEN)
    key_ = _required_text("key", key, KEY_MAX_LEN)
    audience_ = parse_audience(audience)
    value_ = _required_text("value", value)
    if metadata is not None and not isinstance(metadata, Mapping):
        raise ContentValidationError("The metadata field must be an object.")
    return section_, key_, value_, audience_, (dict(metadata) if metadata is not None else None)


def format_content(entries: Sequence[ContentEntry], audience: Audience) -> dict[str, dict[str, str]]:
    """Regroupe des entrées en `{section: {clé: valeur}}` pour une audience.

    Une entrée ciblant précisément l'audience remplace l'entrée `both` du même couple
    (section, clé).
    """
    formatted: dict[str, dict[str, str]] = {}
    matching = [
        e
        for e in entries
        if e.audience is audience or e.audience is Audience.BOTH
    ]
    # "both" d'abord, les entrées spécifiques écrasent ensuite
    for e in sorted(matching, key=lambda e: e.audience is not Audience.BOTH):
        formatted.setdefault(e.section, {})[e.key] = e.value
    return formatted


def _audiences_for(audience: Audience) -> list[str]:
    if audience is Audience.BOTH:
        return [Audience.BOTH.value]
    return [audience.value, Audience.BOTH.value]


class ContentWorkflowService:
    """Orchestrateur du workflow draft → pending → approved → published.

    Responsabilités:
    - Écrire les entrées et ajouter une version à chaque modification (même transaction).
    - Gérer les demandes d'approbation (une seule en attente par entrée).
    - Publier uniquement les entrées approuvées.
    - Exposer la lecture publique formatée, l'aperçu, l'export et l'import.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        now: Callable[[], datetime] | None = None,
        allowed_tenants: list[str] | str | None = None,
        bulk_max_items: int = 500,
    ) -> None:
        """Initialise le service.

        Paramètres:
        - session_factory: factory de sessions SQLAlchemy.
        - now: horloge injectable (UTC par défaut).
        - allowed_tenants: liste blanche des labels tenant pour les métriques.
        - bulk_max_items: taille maximale d'un lot (bulk/import).
        """
        self._factory = session_factory
        self._now = now or utcnow
        self._allowed_tenants = allowed_tenants
        self._bulk_max_items = bulk_max_items
        self._log = structlog.get_logger(__name__).bind(component="content_workflow")

    # ------------------------------------------------------------------ infra

    @contextmanager
    def _transaction(self) -> Iterator[Session]:
        try:
            with session_scope(self._factory) as session:
                yield session
        except ContentError:
            raise
        except SQLAlchemyError as err:
            self._log.error("content_store_error", error=type(err).__name__)
            raise ContentPersistenceError("The content store rejected the operation.") from err

    def _record(self, event: str, operation: str, actor: ActorContext, **fields: Any) -> None:
        CONTENT_TRANSITIONS.labels(
            operation, labelize_tenant(actor.tenant_id, self._allowed_tenants)
        ).inc()
        self._log.info(event, tenant=actor.tenant_id, user=actor.user_id, **fields)

    @staticmethod
    def _get_entry(
        session: Session, actor: ActorContext, content_id: int, lock: bool = False
    ) -> ContentEntryORM:
        row = ContentEntryRepo(session).get(actor.tenant_id, content_id, lock=lock)
        if row is None:
            raise ContentNotFoundError(f"Content {content_id} not found.")
        return row

    def _write(
        self,
        session: Session,
        actor: ActorContext,
        row: ContentEntryORM | None,
        slot: tuple[str, Audience, str],
        value: str,
        metadata: dict[str, Any] | None,
        change_notes: str | None,
    ) -> tuple[ContentEntryORM, ContentVersion]:
        """Écrit la valeur sur l'entrée (créée si absente) puis ajoute la version suivante."""
        now = self._now()
        if row is None:
            section, audience, key = slot
            row = ContentEntryRepo(session).add(
                ContentEntryORM(
                    tenant_id=actor.tenant_id,
                    section=section,
                    audience=audience.value,
                    key=key,
                    value=value,
                    meta=metadata or {},
                    status=ContentStatus.DRAFT.value,
                    created_by=actor.user_id,
                    updated_by=actor.user_id,
                    created_at=now,
                    updated_at=now,
                )
            )
        else:
            row.value = value
            if metadata is not None:
                row.meta = metadata
            row.updated_by = actor.user_id
            row.updated_at = now
            # une demande en attente couvre la dernière valeur
            if row.status != ContentStatus.PENDING.value:
                row.status = ContentStatus.DRAFT.value
                row.approved_by = None
                row.approved_at = None
        version = ContentVersionRepo(session).append(
            row, value, dict(row.meta or {}), change_notes, actor.user_id, created_at=now
        )
        return row, version

    # ------------------------------------------------------------ opérations

    def update_content(
        self,
        actor: ActorContext,
        section: Any,
        key: Any,
        value: Any,
        audience: Any,
        metadata: Any = None,
        change_notes: str | None = None,
    ) -> ContentEntry:
        """Écrit un emplacement de contenu et ajoute une version.

        Le statut n'avance jamais de lui-même : une approbation est nécessaire avant publication.
        """
        section_, key_, value_, audience_, metadata_ = validate_content_input(
            section, key, value, audience, metadata
        )
        with self._transaction() as session:
            row = ContentEntryRepo(session).find_by_slot(
                actor.tenant_id, section_, audience_.value, key_, lock=True
            )
            row, version = self._write(
                session,
                actor,
                row,
                (section_, audience_, key_),
                value_,
                metadata_,
                change_notes,
            )
            entry = entry_to_domain(row)
        self._record(
            "content_updated",
            "update",
            actor,
            content_id=entry.id,
            version=version.version_number,
            status=entry.status.value,
        )
        return entry

    def bulk_update_content(
        self, actor: ActorContext, updates: Sequence[Any]
    ) -> BulkUpdateResult:
        """Applique `update_content` élément par élément.

        Chaque élément a sa propre transaction : un élément invalide n'empêche pas les autres.
        """
        return self._apply_batch(actor, updates, default_notes=None)

    def _apply_batch(
        self, actor: ActorContext, items: Sequence[Any], default_notes: str | None
    ) -> BulkUpdateResult:
        if len(items) > self._bulk_max_items:
            raise ContentValidationError(
                f"A batch may contain at most {self._bulk_max_items} items."
            )
        result = BulkUpdateResult()
        for index, item in enumerate(items):
            if not isinstance(item, Mapping):
                result.errors.append(
                    BulkItemError(index, ContentValidationError.code, "Each item must be an object.")
                )
                continue
            try:
                entry = self.update_content(
                    actor,
                    section=item.get("section"),
                    key=item.get("key"),
                    value=item.get("value"),
                    audience=item.get("audience"),
                    metadata=item.get("metadata"),
                    change_notes=item.get("change_notes") or default_notes,
                )
            except ContentError as err:
                self._log.warning(
                    "bulk_item_failed", tenant=actor.tenant_id, index=index, code=err.code
                )
                result.errors.append(BulkItemError(index, err.code, err.message))
                continue
            result.updated.append(entry)
        return result

    def request_approval(
        self, actor: ActorContext, content_id: int, notes: str | None = None
    ) -> ContentApproval:
        """Crée une demande d'approbation `pending` et passe l'entrée en `pending`.

        Une seconde demande alors qu'une autre est en attente est refusée.
        """
        with self._transaction() as session:
            row = self._get_entry(session, actor, content_id, lock=True)
            if row.status == ContentStatus.ARCHIVED.value:
                raise ContentConflictError("Archived content cannot be submitted for approval.")
            approvals = ContentApprovalRepo(session)
            if approvals.latest_pending(row.id) is not None:
                raise ContentConflictError(
                    "An approval request is already pending for this content."
                )
            now = self._now()
            approval_row = approvals.add(
                ContentApprovalORM(
                    content_id=row.id,
                    tenant_id=actor.tenant_id,
                    requested_by=actor.user_id,
                    status=ApprovalStatus.PENDING.value,
                    request_notes=notes,
                    requested_at=now,
                )
            )
            row.status = ContentStatus.PENDING.value
            row.updated_at = now
            approval = approval_to_domain(approval_row)
        self._record(
            "approval_requested",
            "request_approval",
            actor,
            content_id=content_id,
            approval_id=approval.id,
        )
        return approval

    def approve_content(
        self, actor: ActorContext, content_id: int, notes: str | None = None
    ) -> ContentEntry:
        """Approuve la demande en attente la plus récente et passe l'entrée en `approved`."""
        return self._review(actor, content_id, notes, ApprovalStatus.APPROVED)

    def reject_content(
        self, actor: ActorContext, content_id: int, notes: str | None = None
    ) -> ContentEntry:
        """Rejette la demande en attente la plus récente et repasse l'entrée en `draft`."""
        return self._review(actor, content_id, notes, ApprovalStatus.REJECTED)

    def _review(
        self,
        actor: ActorContext,
        content_id: int,
        notes: str | None,
        decision: ApprovalStatus,
    ) -> ContentEntry:
        with self._transaction() as session:
            row = self._get_entry(session, actor, content_id, lock=True)
            pending = ContentApprovalRepo(session).latest_pending(row.id)
            if pending is None:
                raise ContentConflictError(NO_PENDING_APPROVAL)
            now = self._now()
            pending.status = decision.value
            pending.reviewed_by = actor.user_id
            pending.reviewed_at = now
            pending.review_notes = notes
            if decision is ApprovalStatus.APPROVED:
                row.status = ContentStatus.APPROVED.value
                row.approved_by = actor.user_id
                row.approved_at = now
            else:
                row.status = ContentStatus.DRAFT.value
            row.updated_at = now
            session.flush()
            entry = entry_to_domain(row)
            approval_id = pending.id
        if decision is ApprovalStatus.APPROVED:
            self._record("content_approved", "approve", actor, content_id=content_id, approval_id=approval_id)
        else:
            self._record("content_rejected", "reject", actor, content_id=content_id, approval_id=approval_id)
        return entry

    def publish_content(self, actor: ActorContext, content_id: int) -> ContentEntry:
        """Publie une entrée approuvée ; toute autre situation est un conflit."""
        with self._transaction() as session:
            row = self._get_entry(session, actor, content_id, lock=True)
            if row.status != ContentStatus.APPROVED.value:
                raise ContentConflictError(
                    f"Only approved content can be published (current status: {row.status})."
                )
            now = self._now()
            row.status = ContentStatus.PUBLISHED.value
            row.published_at = now
            row.updated_at = now
            session.flush()
            entry = entry_to_domain(row)
        self._record("content_published", "publish", actor, content_id=content_id)
        return entry

    def revert_to_version(
        self,
        actor: ActorContext,
        content_id: int,
        version_number: int,
        change_notes: str | None = None,
    ) -> ContentEntry:
        """Recopie l'instantané `version_number` sur l'entrée comme une nouvelle modification.

        Produit la version N+1 ; les versions historiques restent inchangées.
        """
        with self._transaction() as session:
            row = self._get_entry(session, actor, content_id, lock=True)
            target = ContentVersionRepo(session).get(row.id, version_number)
            if target is None:
                raise ContentNotFoundError(
                    f"Version {version_number} not found for content {content_id}."
                )
            row, version = self._write(
                session,
                actor,
                row,
                (row.section, Audience(row.audience), row.key),
                target.value,
                dict(target.metadata),
                change_notes or f"Reverted to version {version_number}",
            )
            entry = entry_to_domain(row)
        self._record(
            "content_reverted",
            "revert",
            actor,
            content_id=content_id,
            from_version=version_number,
            version=version.version_number,
        )
        return entry

    def archive_content(self, actor: ActorContext, content_id: int) -> ContentEntry:
        """Retrait logique : l'entrée passe en `archived` et sa demande en attente est close."""
        with self._transaction() as session:
            row = self._get_entry(session, actor, content_id, lock=True)
            if row.status == ContentStatus.ARCHIVED.value:
                raise ContentConflictError("Content is already archived.")
            now = self._now()
            pending = ContentApprovalRepo(session).latest_pending(row.id)
            if pending is not None:
                pending.status = ApprovalStatus.REJECTED.value
                pending.reviewed_by = actor.user_id
                pending.reviewed_at = now
                pending.review_notes = "Content archived"
            row.status = ContentStatus.ARCHIVED.value
            row.updated_by = actor.user_id
            row.updated_at = now
            session.flush()
            entry = entry_to_domain(row)
        self._record("content_archived", "archive", actor, content_id=content_id)
        return entry

    # --------------------------------------------------------------- lecture

    def get_content(self, actor: ActorContext, content_id: int) -> ContentEntry:
        with self._transaction() as session:
            return entry_to_domain(self._get_entry(session, actor, content_id))

    def get_content_history(self, actor: ActorContext, content_id: int) -> list[ContentVersion]:
        """Versions d'une entrée, de la plus récente à la plus ancienne."""
        with self._transaction() as session:
            row = self._get_entry(session, actor, content_id)
            return ContentVersionRepo(session).list_for_content(row.id)

    def get_approval_history(
        self, actor: ActorContext, content_id: int
    ) -> list[ContentApproval]:
        with self._transaction() as session:
            row = self._get_entry(session, actor, content_id)
            return ContentApprovalRepo(session).list_for_content(row.id)

    def get_formatted_content(
        self, tenant_id: str, audience: Any, section: str | None = None
    ) -> dict[str, dict[str, str]]:
        """Lecture publique : uniquement les entrées publiées, regroupées par section."""
        audience_ = parse_audience(audience)
        with self._transaction() as session:
            rows = ContentEntryRepo(session).list_by_status(
                tenant_id,
                [ContentStatus.PUBLISHED.value],
                _audiences_for(audience_),
                section=section,
            )
            entries = [entry_to_domain(r) for r in rows]
        return format_content(entries, audience_)

    def list_content(
        self,
        actor: ActorContext,
        section: str | None = None,
        audience: str | None = None,
        status: str | None = None,
    ) -> dict[str, Any]:
        """Données de la page de gestion (entrées, file d'approbation, listes de valeurs)."""
        audience_ = parse_audience(audience).value if audience else None
        if status:
            try:
                status = ContentStatus(status).value
            except ValueError as err:
                raise ContentValidationError(f"Unknown status filter: {status}.") from err
        with self._transaction() as session:
            rows = ContentEntryRepo(session).list_entries(
                actor.tenant_id, section=section, audience=audience_, status=status
            )
            entries = [entry_to_domain(r) for r in rows]
            pending = ContentApprovalRepo(session).list_pending(actor.tenant_id)
        sections = sorted({e.section for e in entries} | set(SECTION_METADATA_KEYS))
        return {
            "entries": [e.to_dict() for e in entries],
            "pending_approvals": [a.to_dict() for a in pending],
            "sections": sections,
            "audiences": [a.value for a in Audience],
            "statuses": [s.value for s in ContentStatus],
            "metadata_keys": SECTION_METADATA_KEYS,
        }

    def preview_content(
        self, actor: ActorContext, audience: Any, changes: Sequence[Any]
    ) -> dict[str, dict[str, str]]:
        """Rendu formaté des valeurs de travail avec des modifications non enregistrées.

        Rien n'est persisté. Une modification sans audience prend celle de l'aperçu.
        """
        audience_ = parse_audience(audience)
        overlays: list[tuple[str, Audience, str, str]] = []
        for change in changes:
            if not isinstance(change, Mapping):
                raise ContentValidationError("Each preview change must be an object.")
            section_, key_, value_, change_audience, _ = validate_content_input(
                change.get("section"),
                change.get("key"),
                change.get("value"),
                change.get("audience") or audience_,
            )
            overlays.append((section_, change_audience, key_, value_))
        with self._transaction() as session:
            rows = ContentEntryRepo(session).list_entries(actor.tenant_id)
            entries = [entry_to_domain(r) for r in rows]
        by_slot = {e.slot: e for e in entries}
        for section_, audience_item, key_, value_ in overlays:
            slot = (section_, audience_item.value, key_)
            by_slot[slot] = ContentEntry(
                id=by_slot[slot].id if slot in by_slot else 0,
                tenant_id=actor.tenant_id,
                section=section_,
                audience=audience_item,
                key=key_,
                value=value_,
                metadata={},
                status=ContentStatus.DRAFT,
                created_by=actor.user_id,
            )
        return format_content(list(by_slot.values()), audience_)

    def export_content(self, actor: ActorContext, section: str | None = None) -> dict[str, Any]:
        """Export JSON des entrées non archivées du tenant."""
        with self._transaction() as session:
            rows = ContentEntryRepo(session).list_entries(actor.tenant_id, section=section)
            entries = [entry_to_domain(r) for r in rows]
        self._log.info("content_exported", tenant=actor.tenant_id, count=len(entries))
        return {
            "format_version": EXPORT_FORMAT_VERSION,
            "tenant": actor.tenant_id,
            "exported_at": self._now().isoformat(),
            "entries": [
                {
                    "section": e.section,
                    "audience": e.audience.value,
                    "key": e.key,
                    "value": e.value,
                    "metadata": e.metadata,
                    "status": e.status.value,
                }
                for e in entries
            ],
        }

    def import_content(self, actor: ActorContext, payload: Any) -> BulkUpdateResult:
        """Réapplique un export via `update_content` (les statuts ne sont jamais importés)."""
        if not isinstance(payload, Mapping) or not isinstance(payload.get("entries"), list):
            raise ContentValidationError("The import payload must contain an 'entries' list.")
        version = payload.get("format_version", EXPORT_FORMAT_VERSION)
        if version != EXPORT_FORMAT_VERSION:
            raise ContentValidationError(f"Unsupported export format version: {version}.")
        result = self._apply_batch(actor, payload["entries"], default_notes="Imported")
        self._log.info(
            "content_imported",
            tenant=actor.tenant_id,
            imported=result.updated_count,
            failed=len(result.errors),
        )
        return result
