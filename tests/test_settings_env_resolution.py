"""
Tests pour la résolution des variables d'environnement.

Ce module teste le chargement et la résolution des variables d'environnement à partir de fichiers
.env personnalisés dans les settings.
"""

from __future__ import annotations

import importlib
from pathlib import Path

BULK_MAX_FROM_FILE = 7


def test_settings_reads_env_file(tmp_path: Path, monkeypatch) -> None:
    """
    Teste que les settings lisent correctement les fichiers d'environnement.

    Vérifie que les variables définies dans un fichier .env personnalisé (désigné par ENV_FILE)
    sont chargées, y compris la liste des tenants au format JSON.
    """
    env = tmp_path / ".env.custom"
    env.write_text(
        "BULK_UPDATE_MAX_ITEMS=7\n"
        "CONTENT_APPROVER_ROLE=reviewer\n"
        'ALLOWED_TENANTS=["acme","globex"]\n',
        encoding="utf-8",
    )
    monkeypatch.setenv("ENV_FILE", str(env))
    monkeypatch.delenv("BULK_UPDATE_MAX_ITEMS", raising=False)

    settings_mod = importlib.import_module("homepage_cms.core.settings")
    try:
        importlib.reload(settings_mod)
        s = settings_mod.get_settings()
        assert s.BULK_UPDATE_MAX_ITEMS == BULK_MAX_FROM_FILE
        assert s.CONTENT_APPROVER_ROLE == "reviewer"
        assert s.ALLOWED_TENANTS == ["acme", "globex"]
    finally:
        monkeypatch.delenv("ENV_FILE", raising=False)
        importlib.reload(settings_mod)


def test_settings_defaults() -> None:
    settings_mod = importlib.import_module("homepage_cms.core.settings")
    s = settings_mod.Settings(_env_file=None)
    assert s.APP_DEBUG is False
    assert s.DEFAULT_TENANT == "default"
    assert s.CONTENT_ADMIN_ROLE == "content_admin"
    assert s.DATABASE_URL.startswith("sqlite")


def test_settings_only_declare_used_auth_fields() -> None:
    """Teste que seuls les paramètres JWT lus par la vérification des jetons sont déclarés."""
    settings_mod = importlib.import_module("homepage_cms.core.settings")
    fields = settings_mod.Settings.model_fields
    assert {"JWT_SECRET", "JWT_ALG"} <= set(fields)
    assert "JWT_EXPIRES_MIN" not in fields
