"""
Tests pour la validation des tenants et la résolution de l'acteur.

Ce module teste la normalisation des identifiants de tenants, la construction de l'acteur à partir
des claims JWT et les jetons d'accès.
"""

from __future__ import annotations

from homepage_cms.domain.auth import TokenData, create_access_token, decode_token, has_role
from homepage_cms.domain.tenancy import (
    actor_from_claims,
    normalize_tenant,
    safe_tenant,
    tenant_from_context,
)

SECRET = "s3cret"
ALG = "HS256"


def test_normalize_tenant_valid_and_invalid() -> None:
    """Teste la normalisation des identifiants de tenants."""
    assert normalize_tenant(" Tenant_01 ") == "tenant_01"
    assert normalize_tenant("") is None
    assert normalize_tenant("..") is None
    assert normalize_tenant("A" * 65) is None


def test_safe_tenant_defaults() -> None:
    """Teste que les tenants invalides utilisent la valeur par défaut."""
    assert safe_tenant("OK") == "ok"
    assert safe_tenant("..", default="default") == "default"
    assert safe_tenant(None) == "default"


def test_claims_take_precedence_over_header() -> None:
    """Teste que le tenant des claims l'emporte sur l'en-tête."""
    assert tenant_from_context({"tenant": "acme"}, "globex") == "acme"
    assert tenant_from_context({}, "globex") == "globex"
    assert tenant_from_context(None, None) == "default"


def test_actor_from_claims() -> None:
    actor = actor_from_claims({"sub": "u1", "tenant": " ACME "}, None)
    assert actor.user_id == "u1"
    assert actor.tenant_id == "acme"
    fallback = actor_from_claims({"sub": "u2", "tenant": "../etc"}, None, default="main")
    assert fallback.tenant_id == "main"


def test_token_round_trip_and_roles() -> None:
    """Teste la création puis le décodage d'un jeton porteur de rôles."""
    token = create_access_token(
        SECRET, ALG, 5, {"sub": "u1", "tenant": "acme", "roles": ["content_admin"]}
    )
    data = decode_token(token, SECRET, ALG)
    assert isinstance(data, TokenData)
    assert data.tenant == "acme"
    assert has_role(data, "content_admin")
    assert not has_role(data, "content_approver")


def test_invalid_tokens_decode_to_none() -> None:
    assert decode_token("garbage", SECRET, ALG) is None
    assert decode_token(create_access_token(SECRET, ALG, 5, {"sub": "u1"}), "other", ALG) is None
    expired = create_access_token(SECRET, ALG, -1, {"sub": "u1"})
    assert decode_token(expired, SECRET, ALG) is None
    # claims sans `sub`
    assert decode_token(create_access_token(SECRET, ALG, 5, {"tenant": "x"}), SECRET, ALG) is None
