"""Tenancy helpers and acting-user resolution.

Derives a safe tenant label and the `ActorContext` passed explicitly to every workflow operation.
The tenant is taken from authenticated claims first; the `X-Tenant-ID` header is only a fallback
for trusted proxies.
"""

from __future__ import annotations

import re
from typing import Any

from homepage_cms.domain.content import ActorContext

DEFAULT_TENANT = "default"
_SAFE_TENANT_RE = re.compile(r"^[a-z0-9_-]{1,64}$")


def tenant_from_context(user: dict[str, Any] | None, header_tenant: str | None) -> str:
    """Return a tenant label from context.

    Preference order:
    1) user["tenant"] if present (JWT claims)
    2) header_tenant (e.g., injected by trusted auth proxy)
    3) "default"
    """
    if user and isinstance(user.get("tenant"), str) and user["tenant"].strip():
        return user["tenant"].strip()
    if header_tenant and header_tenant.strip():
        return header_tenant.strip()
    return DEFAULT_TENANT


def normalize_tenant(value: str | None) -> str | None:
    """Normalize tenant to lowercase trimmed string if it matches the safe regex.

    Returns None if value is falsy or does not match the allowed pattern.
    """
    if not value:
        return None
    t = value.strip().lower()
    if _SAFE_TENANT_RE.match(t):
        return t
    return None


def safe_tenant(value: str | None, default: str = DEFAULT_TENANT) -> str:
    """Return a safe tenant value (normalized) or the provided default."""
    return normalize_tenant(value) or default


def actor_from_claims(
    claims: dict[str, Any], header_tenant: str | None, default: str = DEFAULT_TENANT
) -> ActorContext:
    """Build the acting user context from token claims and the optional tenant header."""
    tenant = safe_tenant(tenant_from_context(claims, header_tenant), default=default)
    return ActorContext(user_id=str(claims["sub"]), tenant_id=tenant)
