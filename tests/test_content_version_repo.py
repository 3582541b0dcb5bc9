# ============================================================
# Tests : tests/test_content_version_repo.py
# Objet  : Registre des versions et entrées via SQLAlchemy (sqlite mémoire).
# ============================================================
"""
Tests pour les repositories des contenus.

Ce module teste la numérotation des versions, les contraintes d'unicité (emplacement et numéro de
version) et le filtrage par tenant, sur une base SQLite en mémoire.
"""

from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError

from homepage_cms.infra.repo.content_entry_repo import ContentEntryRepo, entry_to_domain
from homepage_cms.infra.repo.content_version_repo import ContentVersionRepo
from homepage_cms.infra.repo.models import ContentEntryORM, ContentVersionORM

VERSION_COUNT = 3


def _entry(session, tenant: str = "t1", key: str = "headline") -> ContentEntryORM:
    """Insère une entrée minimale."""
    return ContentEntryRepo(session).add(
        ContentEntryORM(
            tenant_id=tenant,
            section="hero",
            audience="both",
            key=key,
            value="v0",
            meta={},
            status="draft",
            created_by="u1",
        )
    )


def test_versions_are_sequential(session_factory) -> None:
    """Teste que les versions sont numérotées 1..N et listées de la plus récente à la plus ancienne."""
    session = session_factory()
    entry = _entry(session)
    repo = ContentVersionRepo(session)
    assert repo.next_number(entry.id) == 1
    for i in range(VERSION_COUNT):
        repo.append(entry, f"v{i}", {"i": i}, None, "u1")
    session.commit()
    listed = repo.list_for_content(entry.id)
    assert [v.version_number for v in listed] == [3, 2, 1]
    assert listed[0].value == "v2"
    assert repo.get(entry.id, 1).metadata == {"i": 0}
    assert repo.get(entry.id, 9) is None
    session.close()


def test_duplicate_version_number_rejected(session_factory) -> None:
    """Teste que la contrainte (content_id, version_number) refuse un doublon."""
    session = session_factory()
    entry = _entry(session)
    ContentVersionRepo(session).append(entry, "v1", {}, None, "u1")
    session.add(
        ContentVersionORM(
            content_id=entry.id,
            tenant_id="t1",
            version_number=1,
            value="dup",
            meta={},
            created_by="u1",
        )
    )
    with pytest.raises(IntegrityError):
        session.flush()
    session.rollback()
    session.close()


def test_duplicate_slot_rejected(session_factory) -> None:
    """Teste qu'un même emplacement ne peut exister deux fois pour un tenant."""
    session = session_factory()
    _entry(session)
    with pytest.raises(IntegrityError):
        _entry(session)
    session.rollback()
    # un autre tenant peut occuper le même emplacement
    _entry(session, tenant="t2")
    session.commit()
    session.close()


def test_entry_repo_is_tenant_scoped(session_factory) -> None:
    """Teste que lectures et listes sont bornées au tenant."""
    session = session_factory()
    entry = _entry(session, tenant="t1")
    _entry(session, tenant="t1", key="subtitle")
    session.commit()
    repo = ContentEntryRepo(session)
    assert repo.get("t1", entry.id) is not None
    assert repo.get("t2", entry.id) is None
    assert repo.find_by_slot("t2", "hero", "both", "headline") is None
    assert [r.key for r in repo.list_entries("t1")] == ["headline", "subtitle"]
    assert repo.list_entries("t2") == []
    domain = entry_to_domain(repo.get("t1", entry.id))
    assert domain.slot == ("hero", "both", "headline")
    session.close()


def test_list_entries_hides_archived(session_factory) -> None:
    session = session_factory()
    entry = _entry(session)
    entry.status = "archived"
    session.commit()
    repo = ContentEntryRepo(session)
    assert repo.list_entries("t1") == []
    assert len(repo.list_entries("t1", include_archived=True)) == 1
    assert len(repo.list_entries("t1", status="archived")) == 1
    assert repo.list_by_status("t1", ["published"], ["both"]) == []
    session.close()
