# mypy: ignore-errors
"""
Migration Alembic pour créer les tables du workflow de contenus.

Crée `homepage_content` (entrées), `homepage_content_versions` (registre append-only) et
`homepage_content_approvals` (demandes d'approbation), avec leurs contraintes d'unicité et
leurs clés étrangères en cascade.
"""

from __future__ import annotations

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "20261018_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Crée les trois tables et leurs index."""
    op.create_table(
        "homepage_content",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("tenant_id", sa.String(length=64), nullable=False),
        sa.Column("section", sa.String(length=50), nullable=False),
        sa.Column("audience", sa.String(length=16), nullable=False),
        sa.Column("key", sa.String(length=100), nullable=False),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("metadata", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("created_by", sa.String(length=64), nullable=False),
        sa.Column("updated_by", sa.String(length=64), nullable=True),
        sa.Column("approved_by", sa.String(length=64), nullable=True),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint(
            "tenant_id", "section", "audience", "key", name="uq_content_slot_tenant"
        ),
    )
    op.create_index("ix_homepage_content_tenant_id", "homepage_content", ["tenant_id"])

    op.create_table(
        "homepage_content_versions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "content_id",
            sa.Integer(),
            sa.ForeignKey("homepage_content.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("tenant_id", sa.String(length=64), nullable=False),
        sa.Column("version_number", sa.Integer(), nullable=False),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("metadata", sa.JSON(), nullable=False),
        sa.Column("change_notes", sa.Text(), nullable=True),
        sa.Column("created_by", sa.String(length=64), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint(
            "content_id", "version_number", name="uq_content_version_number"
        ),
    )
    op.create_index(
        "ix_homepage_content_versions_content_id",
        "homepage_content_versions",
        ["content_id"],
    )

    op.create_table(
        "homepage_content_approvals",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "content_id",
            sa.Integer(),
            sa.ForeignKey("homepage_content.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("tenant_id", sa.String(length=64), nullable=False),
        sa.Column("requested_by", sa.String(length=64), nullable=False),
        sa.Column("reviewed_by", sa.String(length=64), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("request_notes", sa.Text(), nullable=True),
        sa.Column("review_notes", sa.Text(), nullable=True),
        sa.Column("requested_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        "ix_homepage_content_approvals_content_id",
        "homepage_content_approvals",
        ["content_id"],
    )


def downgrade() -> None:
    """Supprime les tables dans l'ordre inverse des dépendances."""
    op.drop_index("ix_homepage_content_approvals_content_id", "homepage_content_approvals")
    op.drop_table("homepage_content_approvals")
    op.drop_index("ix_homepage_content_versions_content_id", "homepage_content_versions")
    op.drop_table("homepage_content_versions")
    op.drop_index("ix_homepage_content_tenant_id", "homepage_content")
    op.drop_table("homepage_content")
