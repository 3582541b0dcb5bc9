"""
Export / import des contenus d'un tenant au format JSON.

Ce script pilote `ContentWorkflowService` directement sur la base `DATABASE_URL` : `export` écrit
les entrées non archivées d'un tenant, `import` les réapplique (une version par entrée, statut
`draft`). Utile pour copier les textes d'une instance de recette vers la production.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from homepage_cms.core.settings import get_settings
from homepage_cms.domain.content import ActorContext
from homepage_cms.domain.errors import ContentError
from homepage_cms.domain.tenancy import safe_tenant
from homepage_cms.infra.repo.db import create_schema, get_engine, get_session_factory
from homepage_cms.services.content_workflow import ContentWorkflowService


def build_service(database_url: str | None = None) -> ContentWorkflowService:
    """Construit le service sur la base configurée (schéma créé si besoin)."""
    settings = get_settings()
    engine = get_engine(database_url or settings.DATABASE_URL)
    if settings.AUTO_CREATE_SCHEMA:
        create_schema(engine)
    return ContentWorkflowService(get_session_factory(engine))


def run(argv: list[str] | None = None, service: ContentWorkflowService | None = None) -> int:
    """Exécute la commande ; retourne le code de sortie."""
    parser = argparse.ArgumentParser(description="Export/import des contenus de la page d'accueil")
    parser.add_argument("command", choices=["export", "import"])
    parser.add_argument("path", type=Path, help="Fichier JSON à écrire (export) ou lire (import)")
    parser.add_argument("--tenant", default="default", help="Tenant concerné")
    parser.add_argument("--user", default="cli", help="Utilisateur inscrit dans les versions")
    parser.add_argument("--section", default=None, help="Limiter l'export à une section")
    parser.add_argument("--database-url", default=None)
    args = parser.parse_args(argv)

    service = service or build_service(args.database_url)
    actor = ActorContext(user_id=args.user, tenant_id=safe_tenant(args.tenant))
    try:
        if args.command == "export":
            data = service.export_content(actor, section=args.section)
            args.path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
            print(f"[content] exportées: {len(data['entries'])} entrées vers {args.path}")
            return 0
        payload = json.loads(args.path.read_text(encoding="utf-8"))
        result = service.import_content(actor, payload)
    except ContentError as err:
        print(f"[content] échec: {err.message}", file=sys.stderr)
        return 1
    except (OSError, json.JSONDecodeError) as err:
        print(f"[content] échec: {err}", file=sys.stderr)
        return 1
    for error in result.errors:
        print(f"[content] entrée #{error.index} ignorée: {error.message}", file=sys.stderr)
    print(f"[content] importées: {result.updated_count} entrées depuis {args.path}")
    return 0 if not result.errors else 2


def main() -> None:
    """Point d'entrée du script."""
    sys.exit(run())


if __name__ == "__main__":  # pragma: no cover - script entry
    main()
