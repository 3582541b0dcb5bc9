"""SQLAlchemy models for persistence layer (homepage content workflow)."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, relationship


def utcnow() -> datetime:
    """Horodatage UTC courant."""
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Classe de base pour tous les modèles SQLAlchemy."""

    metadata = MetaData()


class ContentEntryORM(Base):
    """Modèle ORM pour les entrées de contenu (un emplacement par tenant)."""

    __tablename__ = "homepage_content"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(String(64), nullable=False, index=True)
    section = Column(String(50), nullable=False)
    audience = Column(String(16), nullable=False)
    key = Column(String(100), nullable=False)
    value = Column(Text, nullable=False)
    # "metadata" est réservé par la déclarative SQLAlchemy
    meta = Column("metadata", JSON, nullable=False, default=dict)
    status = Column(String(16), nullable=False, default="draft")
    created_by = Column(String(64), nullable=False)
    updated_by = Column(String(64), nullable=True)
    approved_by = Column(String(64), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    published_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    versions = relationship(
        "ContentVersionORM",
        back_populates="content",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    approvals = relationship(
        "ContentApprovalORM",
        back_populates="content",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint(
            "tenant_id", "section", "audience", "key", name="uq_content_slot_tenant"
        ),
    )


class ContentVersionORM(Base):
    """Modèle ORM pour l'historique append-only des valeurs."""

    __tablename__ = "homepage_content_versions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    content_id = Column(
        Integer,
        ForeignKey("homepage_content.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    tenant_id = Column(String(64), nullable=False)
    version_number = Column(Integer, nullable=False)
    value = Column(Text, nullable=False)
    meta = Column("metadata", JSON, nullable=False, default=dict)
    change_notes = Column(Text, nullable=True)
    created_by = Column(String(64), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    content = relationship("ContentEntryORM", back_populates="versions")

    __table_args__ = (
        UniqueConstraint("content_id", "version_number", name="uq_content_version_number"),
    )


class ContentApprovalORM(Base):
    """Modèle ORM pour les demandes d'approbation."""

    __tablename__ = "homepage_content_approvals"

    id = Column(Integer, primary_key=True, autoincrement=True)
    content_id = Column(
        Integer,
        ForeignKey("homepage_content.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    tenant_id = Column(String(64), nullable=False)
    requested_by = Column(String(64), nullable=False)
    reviewed_by = Column(String(64), nullable=True)
    status = Column(String(16), nullable=False, default="pending")
    request_notes = Column(Text, nullable=True)
    review_notes = Column(Text, nullable=True)
    requested_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)

    content = relationship("ContentEntryORM", back_populates="approvals")
