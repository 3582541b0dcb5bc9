# Schémas Pydantic exposés par l'API (requêtes).

from typing import Any

from pydantic import BaseModel, Field

from homepage_cms.domain.content import KEY_MAX_LEN, SECTION_MAX_LEN, Audience


class ContentUpdateRequest(BaseModel):
    """Modification d'un emplacement de contenu.

    Champs:
    - section: str (1..50 caractères)
    - key: str (1..100 caractères)
    - value: str (obligatoire)
    - audience: individual | institutional | both
    - metadata: dict | None (None conserve les métadonnées existantes)
    - change_notes: str | None (notes de version)
    """

    section: str = Field(min_length=1, max_length=SECTION_MAX_LEN)
    key: str = Field(min_length=1, max_length=KEY_MAX_LEN)
    value: str = Field(min_length=1)
    audience: Audience
    metadata: dict[str, Any] | None = None
    change_notes: str | None = None


class BulkUpdateRequest(BaseModel):
    """Lot de modifications ; chaque élément est validé individuellement par le service."""

    updates: list[Any] = Field(min_length=1)


class NotesRequest(BaseModel):
    """Notes facultatives d'une demande ou d'une relecture."""

    notes: str | None = None


class RevertRequest(BaseModel):
    """Retour à une version antérieure."""

    version_number: int = Field(ge=1)
    change_notes: str | None = None


class PreviewRequest(BaseModel):
    """Aperçu : audience ciblée et modifications non enregistrées."""

    audience: Audience = Audience.BOTH
    changes: list[Any] = Field(default_factory=list)


class ImportRequest(BaseModel):
    """Contenu d'un export à réappliquer."""

    format_version: int = 1
    entries: list[Any]
