"""
Module d'authentification par jetons JWT.

Ce module fournit la création et la validation des jetons d'accès portant l'utilisateur agissant,
son tenant et ses rôles sur le back-office de contenus.
"""

from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt import InvalidTokenError
from pydantic import BaseModel, ValidationError


class TokenData(BaseModel):
    """Données contenues dans un token JWT."""

    sub: str
    tenant: str | None = None
    email: str | None = None
    roles: list[str] = []


def create_access_token(
    secret: str, alg: str, expires_min: int, payload: dict[str, Any]
) -> str:
    """Crée un token JWT d'accès avec expiration."""
    to_encode = payload.copy()
    expire = datetime.now(UTC) + timedelta(minutes=expires_min)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, secret, algorithm=alg)


def decode_token(token: str, secret: str, alg: str) -> TokenData | None:
    """Décode et valide un token JWT. Retourne None si le jeton est invalide ou expiré."""
    try:
        data = jwt.decode(token, secret, algorithms=[alg])
        return TokenData(**data)
    except (InvalidTokenError, ValidationError):
        return None


def has_role(token: TokenData, role: str) -> bool:
    """Vérifie qu'un jeton porte un rôle donné."""
    return role in set(token.roles)
