"""
Meal Planner Backend - Cookbook Record Model
============================================

What:  ORM model for the `cookbooks` collection (upload metadata).
Who:   Written by CookbookService.upload_cookbook() after the blob write
       succeeds; read by list_cookbooks() and the orphan reconciliation pass.

Invariant:
    `storage_path` references a blob that was written before this record
    was inserted. The two writes are not transactional; see
    CookbookService.reconcile_orphaned_blobs() for the cleanup side.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import BigInteger, DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from mealplanner.database import Base


class Cookbook(Base):
    """Metadata for one uploaded cookbook file."""

    __tablename__ = "cookbooks"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        comment="Document identifier",
    )

    # Original filename exactly as the client sent it (display only)
    name: Mapped[str] = mapped_column(
        String(512),
        nullable=False,
        comment="Original filename of the upload",
    )

    # Key inside the blob bucket, e.g. cookbooks/1718000000000_3f9a1c2b_Salt_Fat.pdf
    storage_path: Mapped[str] = mapped_column(
        String(1024),
        nullable=False,
        unique=True,
        comment="Blob key of the stored file",
    )

    content_type: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default="application/octet-stream",
        comment="Declared MIME type of the upload",
    )

    size_bytes: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=0,
        comment="Size of the stored blob in bytes",
    )

    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        comment="When the upload completed (UTC)",
    )

    def __repr__(self) -> str:
        return f"<Cookbook(id={self.id}, name='{self.name}', storage_path='{self.storage_path}')>"
