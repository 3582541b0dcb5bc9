"""Erreurs métier du workflow de contenus.

Chaque erreur porte une catégorie (`ErrorKind`) que la passerelle HTTP projette sur un code de
statut distinct, tout en conservant l'enveloppe JSON historique `{success: false, message}`.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Catégories d'erreurs du workflow."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    PERSISTENCE = "persistence"


class ContentError(Exception):
    """Erreur de base du workflow de contenus."""

    kind: ErrorKind = ErrorKind.PERSISTENCE
    code: str = "CONTENT_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ContentValidationError(ContentError):
    """Entrée invalide (champ manquant, trop long, audience inconnue...)."""

    kind = ErrorKind.VALIDATION
    code = "VALIDATION_ERROR"


class ContentNotFoundError(ContentError):
    """Entrée ou version introuvable pour le tenant courant."""

    kind = ErrorKind.NOT_FOUND
    code = "NOT_FOUND"


class ContentConflictError(ContentError):
    """Violation d'une règle du workflow (pas d'approbation en attente, publication non approuvée...)."""

    kind = ErrorKind.CONFLICT
    code = "CONFLICT"


class ContentPersistenceError(ContentError):
    """Échec d'écriture/lecture dans le stockage relationnel."""

    kind = ErrorKind.PERSISTENCE
    code = "PERSISTENCE_ERROR"
