"""Dépendances partagées pour les routes de l'API.

But du module
-------------
- Donner accès au conteneur de l'application (settings, service de workflow) sans état global,
  pour que les tests puissent construire une application sur leur propre base.
- Résoudre l'acteur (utilisateur + tenant) depuis le jeton Bearer et vérifier les rôles.
"""

from fastapi import Depends, Header, HTTPException, Request

from homepage_cms.core.container import Container
from homepage_cms.core.http_constants import HTTP_FORBIDDEN, HTTP_UNAUTHORIZED
from homepage_cms.core.settings import Settings
from homepage_cms.domain.auth import TokenData, decode_token, has_role
from homepage_cms.domain.content import ActorContext
from homepage_cms.domain.tenancy import actor_from_claims, safe_tenant
from homepage_cms.services.content_workflow import ContentWorkflowService


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_settings(container: Container = Depends(get_container)) -> Settings:
    return container.settings


def get_workflow(container: Container = Depends(get_container)) -> ContentWorkflowService:
    return container.workflow


def get_token(
    authorization: str | None = Header(None),
    settings: Settings = Depends(get_settings),
) -> TokenData:
    """Extrait et valide le jeton Bearer."""
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=HTTP_UNAUTHORIZED, detail="missing_token")
    token = authorization.split(" ", 1)[1]
    data = decode_token(token, settings.JWT_SECRET, settings.JWT_ALG)
    if not data:
        raise HTTPException(status_code=HTTP_UNAUTHORIZED, detail="invalid_token")
    return data


def _actor(request: Request, token: TokenData, header_tenant: str | None, settings: Settings) -> ActorContext:
    actor = actor_from_claims(token.model_dump(), header_tenant, default=settings.DEFAULT_TENANT)
    request.state.tenant_id = actor.tenant_id
    return actor


def get_actor(
    request: Request,
    token: TokenData = Depends(get_token),
    x_tenant_id: str | None = Header(None),
    settings: Settings = Depends(get_settings),
) -> ActorContext:
    """Acteur du back-office : rôle éditeur ou relecteur requis."""
    if not (
        has_role(token, settings.CONTENT_ADMIN_ROLE)
        or has_role(token, settings.CONTENT_APPROVER_ROLE)
    ):
        raise HTTPException(status_code=HTTP_FORBIDDEN, detail="missing_role:content_admin")
    return _actor(request, token, x_tenant_id, settings)


def get_editor(
    request: Request,
    token: TokenData = Depends(get_token),
    x_tenant_id: str | None = Header(None),
    settings: Settings = Depends(get_settings),
) -> ActorContext:
    """Acteur autorisé à modifier les contenus."""
    if not has_role(token, settings.CONTENT_ADMIN_ROLE):
        raise HTTPException(
            status_code=HTTP_FORBIDDEN, detail=f"missing_role:{settings.CONTENT_ADMIN_ROLE}"
        )
    return _actor(request, token, x_tenant_id, settings)


def get_approver(
    request: Request,
    token: TokenData = Depends(get_token),
    x_tenant_id: str | None = Header(None),
    settings: Settings = Depends(get_settings),
) -> ActorContext:
    """Acteur autorisé à approuver, rejeter et publier."""
    if not has_role(token, settings.CONTENT_APPROVER_ROLE):
        raise HTTPException(
            status_code=HTTP_FORBIDDEN, detail=f"missing_role:{settings.CONTENT_APPROVER_ROLE}"
        )
    return _actor(request, token, x_tenant_id, settings)


def get_public_tenant(
    request: Request,
    x_tenant_id: str | None = Header(None),
    settings: Settings = Depends(get_settings),
) -> str:
    """Tenant de la lecture publique (en-tête posé par le proxy de confiance)."""
    tenant = safe_tenant(x_tenant_id, default=settings.DEFAULT_TENANT)
    request.state.tenant_id = tenant
    return tenant
