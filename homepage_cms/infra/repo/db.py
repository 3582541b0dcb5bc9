"""DB utilities for SQLAlchemy sessions/engine.

Uses `DATABASE_URL` env var or falls back to `sqlite+pysqlite:///:memory:` for tests.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .models import Base


def get_engine(url: str | None = None, echo: bool = False) -> Engine:
    """Crée un moteur SQLAlchemy à partir de l'URL de base de données.

    Pour SQLite, active les clés étrangères (cascade) et partage une connexion unique quand la
    base est en mémoire.
    """
    db_url = url or os.getenv("DATABASE_URL") or "sqlite+pysqlite:///:memory:"
    kwargs = {}
    if db_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in db_url or db_url.rstrip("/").endswith("sqlite:"):
            kwargs["poolclass"] = StaticPool
    engine = create_engine(db_url, echo=echo, **kwargs)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _enable_sqlite_fk)
    return engine


def _enable_sqlite_fk(dbapi_connection, _record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_schema(engine: Engine) -> None:
    """Crée les tables manquantes (tests/dev ; la prod passe par Alembic)."""
    Base.metadata.create_all(engine)


def get_session_factory(engine: Engine) -> sessionmaker:
    """Crée une factory de sessions SQLAlchemy."""
    return sessionmaker(bind=engine, class_=Session, expire_on_commit=False)


@contextmanager
def session_scope(factory: sessionmaker) -> Iterator[Session]:
    """Contexte de session SQLAlchemy avec gestion automatique des transactions.

    Commit en sortie normale, rollback sur toute exception (qui est ensuite propagée) : une
    opération du workflow est donc appliquée entièrement ou pas du tout.
    """
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
