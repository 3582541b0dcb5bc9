"""
Modèle de domaine du workflow de contenus de la page d'accueil (POPO).

Ce module définit les objets manipulés par le service de workflow : une entrée de contenu adressée
par un emplacement (section, audience, clé), ses versions immuables et ses demandes d'approbation.
Les objets sont indépendants de SQLAlchemy ; la conversion se fait dans `infra.repo`.
"""

# ============================================================
# Module : homepage_cms/domain/content.py
# Objet  : Entrées, versions et approbations de contenu (POPO).
# ============================================================

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

SECTION_MAX_LEN = 50
KEY_MAX_LEN = 100


class Audience(str, Enum):
    """Public ciblé par un emplacement de contenu."""

    INDIVIDUAL = "individual"
    INSTITUTIONAL = "institutional"
    BOTH = "both"


class ContentStatus(str, Enum):
    """États d'une entrée de contenu."""

    DRAFT = "draft"
    PENDING = "pending"
    APPROVED = "approved"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class ApprovalStatus(str, Enum):
    """États d'une demande d'approbation."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# Clés de métadonnées documentées par section (indicatives, non imposées).
SECTION_METADATA_KEYS: dict[str, list[str]] = {
    "hero": ["cta_url", "cta_label", "image_url", "alt_text"],
    "features": ["icon", "order", "link_url"],
    "testimonials": ["author", "role", "institution", "avatar_url"],
    "statistics": ["unit", "source", "as_of"],
    "pricing": ["currency", "billing_period", "highlight"],
    "cta": ["button_label", "button_url", "style"],
    "footer": ["link_url", "order"],
}


@dataclass(frozen=True)
class ActorContext:
    """Acteur d'une opération : utilisateur agissant et tenant courant."""

    user_id: str
    tenant_id: str


@dataclass
class ContentEntry:
    """
    Entrée de contenu (un emplacement logique de la page d'accueil).

    Attributs
    - id: identifiant technique.
    - tenant_id: tenant propriétaire.
    - section / audience / key: adresse de l'emplacement (unique par tenant).
    - value: texte libre.
    - metadata: sac clé/valeur ouvert (voir `SECTION_METADATA_KEYS`).
    - status: état dans le workflow.
    - created_by / updated_by / approved_by: références utilisateur.
    - approved_at / published_at / created_at / updated_at: dates ISO ("" si absent).
    """

    id: int
    tenant_id: str
    section: str
    audience: Audience
    key: str
    value: str
    metadata: dict[str, Any]
    status: ContentStatus
    created_by: str
    updated_by: str | None = None
    approved_by: str | None = None
    approved_at: str | None = None
    published_at: str | None = None
    created_at: str = ""
    updated_at: str = ""

    @property
    def slot(self) -> tuple[str, str, str]:
        """Adresse (section, audience, clé) de l'entrée."""
        return (self.section, self.audience.value, self.key)

    def to_dict(self) -> dict[str, Any]:
        """Représentation JSON de l'entrée."""
        return {
            "id": self.id,
            "tenant_id": self.tenant_id,
            "section": self.section,
            "audience": self.audience.value,
            "key": self.key,
            "value": self.value,
            "metadata": dict(self.metadata),
            "status": self.status.value,
            "created_by": self.created_by,
            "updated_by": self.updated_by,
            "approved_by": self.approved_by,
            "approved_at": self.approved_at,
            "published_at": self.published_at,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass(frozen=True)
class ContentVersion:
    """Instantané immuable de la valeur d'une entrée après une modification."""

    id: int
    content_id: int
    version_number: int
    value: str
    metadata: dict[str, Any]
    change_notes: str | None
    created_by: str
    created_at: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "content_id": self.content_id,
            "version_number": self.version_number,
            "value": self.value,
            "metadata": dict(self.metadata),
            "change_notes": self.change_notes,
            "created_by": self.created_by,
            "created_at": self.created_at,
        }


@dataclass
class ContentApproval:
    """Demande d'approbation liée à une entrée et à un couple demandeur/relecteur."""

    id: int
    content_id: int
    requested_by: str
    status: ApprovalStatus
    request_notes: str | None = None
    reviewed_by: str | None = None
    review_notes: str | None = None
    requested_at: str = ""
    reviewed_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "content_id": self.content_id,
            "requested_by": self.requested_by,
            "status": self.status.value,
            "request_notes": self.request_notes,
            "reviewed_by": self.reviewed_by,
            "review_notes": self.review_notes,
            "requested_at": self.requested_at,
            "reviewed_at": self.reviewed_at,
        }


@dataclass
class BulkItemError:
    """Échec d'un élément dans un traitement par lot."""

    index: int
    code: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"index": self.index, "code": self.code, "message": self.message}


@dataclass
class BulkUpdateResult:
    """Résultat d'une mise à jour par lot : entrées appliquées et échecs par élément."""

    updated: list[ContentEntry] = field(default_factory=list)
    errors: list[BulkItemError] = field(default_factory=list)

    @property
    def updated_count(self) -> int:
        return len(self.updated)
