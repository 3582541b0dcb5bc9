"""
Routes d'administration des contenus de la page d'accueil.

Ce module regroupe les endpoints `/admin/content` : édition versionnée, demandes d'approbation,
relecture, publication, historique, retour arrière, aperçu, export et import. Les réponses
conservent l'enveloppe `{"success": true, ...}` ; les erreurs sont mises en forme par
`apigw.errors`.
"""

from fastapi import APIRouter, Depends, Query

from homepage_cms.api.deps import (
    get_actor,
    get_approver,
    get_editor,
    get_public_tenant,
    get_workflow,
)
from homepage_cms.api.schemas import (
    BulkUpdateRequest,
    ContentUpdateRequest,
    ImportRequest,
    NotesRequest,
    PreviewRequest,
    RevertRequest,
)
from homepage_cms.domain.content import ActorContext, Audience
from homepage_cms.services.content_workflow import ContentWorkflowService

router = APIRouter(prefix="/admin/content", tags=["content"])
workflow_dep = Depends(get_workflow)
actor_dep = Depends(get_actor)
editor_dep = Depends(get_editor)
approver_dep = Depends(get_approver)


@router.get("")
def index(
    section: str | None = None,
    audience: Audience | None = None,
    status: str | None = None,
    actor: ActorContext = actor_dep,
    workflow: ContentWorkflowService = workflow_dep,
):
    """Données de la page de gestion : entrées, approbations en attente, listes de valeurs."""
    page = workflow.list_content(
        actor, section=section, audience=audience.value if audience else None, status=status
    )
    return {"success": True, **page}


@router.get("/data")
def content_data(
    audience: Audience = Audience.BOTH,
    section: str | None = None,
    actor: ActorContext = actor_dep,
    workflow: ContentWorkflowService = workflow_dep,
):
    """Contenu publié formaté `{section: {clé: valeur}}` pour une audience."""
    content = workflow.get_formatted_content(actor.tenant_id, audience, section=section)
    return {"success": True, "content": content}


@router.post("/update")
def update(
    payload: ContentUpdateRequest,
    actor: ActorContext = editor_dep,
    workflow: ContentWorkflowService = workflow_dep,
):
    """Modifie un emplacement (création si absent) et ajoute une version."""
    entry = workflow.update_content(
        actor,
        section=payload.section,
        key=payload.key,
        value=payload.value,
        audience=payload.audience,
        metadata=payload.metadata,
        change_notes=payload.change_notes,
    )
    return {"success": True, "content": entry.to_dict()}


@router.post("/bulk-update")
def bulk_update(
    payload: BulkUpdateRequest,
    actor: ActorContext = editor_dep,
    workflow: ContentWorkflowService = workflow_dep,
):
    """Applique un lot de modifications ; les échecs par élément sont listés dans `errors`."""
    result = workflow.bulk_update_content(actor, payload.updates)
    return {
        "success": True,
        "updated_count": result.updated_count,
        "content": [e.to_dict() for e in result.updated],
        "errors": [e.to_dict() for e in result.errors],
    }


@router.post("/preview")
def preview(
    payload: PreviewRequest,
    actor: ActorContext = actor_dep,
    workflow: ContentWorkflowService = workflow_dep,
):
    """Rendu des valeurs de travail avec les modifications fournies, sans enregistrement."""
    rendered = workflow.preview_content(actor, payload.audience, payload.changes)
    return {"success": True, "preview": rendered}


@router.get("/export")
def export(
    section: str | None = None,
    actor: ActorContext = actor_dep,
    workflow: ContentWorkflowService = workflow_dep,
):
    return {"success": True, "export": workflow.export_content(actor, section=section)}


@router.post("/import")
def import_content(
    payload: ImportRequest,
    actor: ActorContext = editor_dep,
    workflow: ContentWorkflowService = workflow_dep,
):
    """Réapplique un export ; chaque entrée importée crée une version."""
    result = workflow.import_content(actor, payload.model_dump())
    return {
        "success": True,
        "imported_count": result.updated_count,
        "content": [e.to_dict() for e in result.updated],
        "errors": [e.to_dict() for e in result.errors],
    }


@router.get("/{content_id}")
def show(
    content_id: int,
    actor: ActorContext = actor_dep,
    workflow: ContentWorkflowService = workflow_dep,
):
    return {"success": True, "content": workflow.get_content(actor, content_id).to_dict()}


@router.delete("/{content_id}")
def archive(
    content_id: int,
    actor: ActorContext = editor_dep,
    workflow: ContentWorkflowService = workflow_dep,
):
    """Retrait logique d'une entrée (statut `archived`)."""
    entry = workflow.archive_content(actor, content_id)
    return {"success": True, "content": entry.to_dict()}


@router.post("/{content_id}/request-approval")
def request_approval(
    content_id: int,
    payload: NotesRequest | None = None,
    actor: ActorContext = editor_dep,
    workflow: ContentWorkflowService = workflow_dep,
):
    """Soumet l'entrée à relecture (409 si une demande est déjà en attente)."""
    notes = payload.notes if payload else None
    approval = workflow.request_approval(actor, content_id, notes=notes)
    return {"success": True, "approval": approval.to_dict()}


@router.post("/{content_id}/approve")
def approve(
    content_id: int,
    payload: NotesRequest | None = None,
    actor: ActorContext = approver_dep,
    workflow: ContentWorkflowService = workflow_dep,
):
    entry = workflow.approve_content(actor, content_id, notes=payload.notes if payload else None)
    return {"success": True, "content": entry.to_dict()}


@router.post("/{content_id}/reject")
def reject(
    content_id: int,
    payload: NotesRequest | None = None,
    actor: ActorContext = approver_dep,
    workflow: ContentWorkflowService = workflow_dep,
):
    entry = workflow.reject_content(actor, content_id, notes=payload.notes if payload else None)
    return {"success": True, "content": entry.to_dict()}


@router.post("/{content_id}/publish")
def publish(
    content_id: int,
    actor: ActorContext = approver_dep,
    workflow: ContentWorkflowService = workflow_dep,
):
    """Publie une entrée approuvée (409 sinon)."""
    entry = workflow.publish_content(actor, content_id)
    return {"success": True, "content": entry.to_dict()}


@router.get("/{content_id}/history")
def history(
    content_id: int,
    actor: ActorContext = actor_dep,
    workflow: ContentWorkflowService = workflow_dep,
):
    """Versions (plus récente d'abord) et demandes d'approbation d'une entrée."""
    versions = workflow.get_content_history(actor, content_id)
    approvals = workflow.get_approval_history(actor, content_id)
    return {
        "success": True,
        "history": [v.to_dict() for v in versions],
        "approvals": [a.to_dict() for a in approvals],
    }


@router.post("/{content_id}/revert")
def revert(
    payload: RevertRequest,
    content_id: int,
    actor: ActorContext = editor_dep,
    workflow: ContentWorkflowService = workflow_dep,
):
    """Recopie une version antérieure comme nouvelle version."""
    entry = workflow.revert_to_version(
        actor, content_id, payload.version_number, change_notes=payload.change_notes
    )
    return {"success": True, "content": entry.to_dict()}


public_router = APIRouter(tags=["content"])


@public_router.get("/content")
def public_content(
    audience: Audience = Query(Audience.BOTH),
    section: str | None = None,
    tenant: str = Depends(get_public_tenant),
    workflow: ContentWorkflowService = workflow_dep,
):
    """Lecture publique : uniquement les contenus publiés."""
    content = workflow.get_formatted_content(tenant, audience, section=section)
    return {"success": True, "content": content}
