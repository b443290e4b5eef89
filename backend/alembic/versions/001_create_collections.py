"""Create favorites and cookbooks collections

Revision ID: 001
Revises: None
Create Date: 2026-10-18 00:00:00.000000+00:00

What:  Creates the two document store collections as tables.
Rollback: downgrade() drops both tables (destructive).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "favorites",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False, comment="Document identifier"),
        sa.Column(
            "content",
            sa.Text(),
            nullable=False,
            comment="Meal plan markdown as submitted by the client",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="When the plan was saved (UTC)",
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "cookbooks",
        sa.Column("id", sa.Uuid(as_uuid=True), nullable=False, comment="Document identifier"),
        sa.Column("name", sa.String(512), nullable=False, comment="Original filename of the upload"),
        sa.Column(
            "storage_path",
            sa.String(1024),
            nullable=False,
            comment="Blob key of the stored file",
        ),
        sa.Column(
            "content_type",
            sa.String(255),
            nullable=False,
            server_default=sa.text("'application/octet-stream'"),
            comment="Declared MIME type of the upload",
        ),
        sa.Column(
            "size_bytes",
            sa.BigInteger(),
            nullable=False,
            server_default=sa.text("0"),
            comment="Size of the stored blob in bytes",
        ),
        sa.Column(
            "uploaded_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="When the upload completed (UTC)",
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("storage_path", name="uq_cookbooks_storage_path"),
    )


def downgrade() -> None:
    op.drop_table("cookbooks")
    op.drop_table("favorites")
