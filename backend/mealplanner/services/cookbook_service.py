"""
Meal Planner Backend - Cookbook Service
=======================================

What:  Stores uploaded cookbook files and their metadata records.
Who:   Called by POST /upload-cookbook and GET /cookbooks; the orphan
       reconciliation pass runs from the application lifespan.

Upload Flow:
    ┌──────────┐    ┌──────────────┐    ┌──────────────────┐
    │  Route   │───▶│  Blob write  │───▶│  Metadata record │
    │ (bytes)  │    │ (BlobStore)  │    │  (cookbooks)     │
    └──────────┘    └──────────────┘    └──────────────────┘

    Blob write fails     → abort, no record is written
    Record write fails   → delete the blob just written (best effort), 500

The two writes are not transactional. If the compensating delete also
fails (or the process dies between the writes) the blob is orphaned;
reconcile_orphaned_blobs() finds and removes those.

Storage keys:
    cookbooks/<epoch-millis>_<8 hex chars>_<sanitized filename>

    The random token keeps keys unique for identical filenames uploaded in
    the same millisecond. The filename is reduced to its basename and every
    character outside [A-Za-z0-9._-] becomes '_', so a key never contains
    separators, '..' segments, or control characters.
"""

import logging
import re
import secrets
import time
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mealplanner.exceptions import (
    BlobStorageError,
    ClientInputError,
    DocumentStoreError,
)
from mealplanner.models.cookbook import Cookbook
from mealplanner.schemas.cookbook import CookbookItem
from mealplanner.services.blob_store import BlobStore, blob_store

logger = logging.getLogger(__name__)

COOKBOOK_PREFIX = "cookbooks/"
DEFAULT_CONTENT_TYPE = "application/octet-stream"
MAX_FILENAME_LENGTH = 200

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def sanitize_filename(filename: Optional[str]) -> str:
    """
    Reduce a client-supplied filename to a safe single path segment.

    >>> sanitize_filename("../../etc/passwd")
    'passwd'
    >>> sanitize_filename("My Cookbook (2nd ed).pdf")
    'My_Cookbook__2nd_ed_.pdf'
    """
    # Both separators count: browsers on Windows may send C:\\path\\file.pdf
    basename = (filename or "").replace("\\", "/").split("/")[-1]
    safe = _UNSAFE_FILENAME_CHARS.sub("_", basename).lstrip(".")
    safe = safe[-MAX_FILENAME_LENGTH:]
    return safe or "upload"


def build_storage_key(filename: Optional[str], now: Optional[datetime] = None) -> str:
    """Build a collision-resistant blob key for an upload."""
    moment = now or datetime.now(timezone.utc)
    millis = int(moment.timestamp() * 1000)
    token = secrets.token_hex(4)
    return f"{COOKBOOK_PREFIX}{millis}_{token}_{sanitize_filename(filename)}"


class CookbookService:
    """
    Business logic for cookbook uploads.

    Args:
        store: Blob store override (tests). Defaults to the LocalBlobStore singleton.
    """

    def __init__(self, store: Optional[BlobStore] = None):
        self._store = store

    @property
    def blob_store(self) -> BlobStore:
        return self._store or blob_store

    @blob_store.setter
    def blob_store(self, store: Optional[BlobStore]) -> None:
        self._store = store

    async def upload_cookbook(
        self,
        db: AsyncSession,
        filename: Optional[str],
        content: bytes,
        content_type: Optional[str] = None,
    ) -> Cookbook:
        """
        Store an uploaded cookbook: blob first, then the metadata record.

        Args:
            db: Async session (injected by FastAPI)
            filename: Original filename from the multipart part
            content: Entire file content (already size-checked by the route)
            content_type: Declared MIME type of the part

        Returns:
            The stored Cookbook record.

        Raises:
            ClientInputError: no filename at all (not a file part)
            BlobStorageError: the blob write failed (no record written)
            DocumentStoreError: the record write failed (blob removed if possible)
        """
        if filename is None:
            raise ClientInputError(message="No file uploaded.", field="cookbookFile")

        content_type = content_type or DEFAULT_CONTENT_TYPE
        storage_key = build_storage_key(filename)
        start_time = time.perf_counter()

        # ── Step 1: Blob write ────────────────────────────────────────────
        try:
            await self.blob_store.put(storage_key, content, content_type)
        except BlobStorageError as e:
            logger.error("Error uploading cookbook blob %s: %s", storage_key, e.context)
            raise BlobStorageError(
                message="Failed to upload cookbook.",
                context={**e.context, "filename": filename},
            ) from e

        # ── Step 2: Metadata record ───────────────────────────────────────
        record = Cookbook(
            name=filename,
            storage_path=storage_key,
            content_type=content_type,
            size_bytes=len(content),
        )
        try:
            db.add(record)
            await db.flush()
            await db.commit()
        except Exception as e:
            await db.rollback()
            logger.error(
                "Error recording cookbook %s, removing blob: %s",
                storage_key,
                str(e),
                exc_info=True,
            )
            await self._discard_blob(storage_key)
            raise DocumentStoreError(
                message="Failed to upload cookbook.",
                context={"storage_path": storage_key, "error_type": type(e).__name__},
            ) from e

        logger.info(
            "Cookbook uploaded: %s → %s (%d bytes, %.0fms)",
            filename,
            storage_key,
            len(content),
            (time.perf_counter() - start_time) * 1000,
        )
        return record

    async def _discard_blob(self, storage_key: str) -> None:
        """Compensating delete after a failed metadata write. Failures are logged only."""
        try:
            await self.blob_store.delete(storage_key)
        except BlobStorageError as e:
            logger.warning(
                "Orphaned blob left behind at %s (will be reconciled): %s",
                storage_key,
                e.context,
            )

    async def list_cookbooks(self, db: AsyncSession) -> List[CookbookItem]:
        """
        Return every cookbook record, unordered and unpaginated.

        Raises:
            DocumentStoreError: the query failed
        """
        try:
            result = await db.execute(select(Cookbook))
            cookbooks = list(result.scalars().all())
        except Exception as e:
            logger.error("Error fetching cookbooks: %s", str(e), exc_info=True)
            raise DocumentStoreError(
                message="Failed to fetch cookbooks.",
                context={"error_type": type(e).__name__},
            ) from e

        return [CookbookItem.model_validate(cookbook) for cookbook in cookbooks]

    async def reconcile_orphaned_blobs(
        self,
        db: AsyncSession,
        min_age_seconds: int = 300,
    ) -> List[str]:
        """
        Delete cookbook blobs that have no metadata record.

        Blobs younger than `min_age_seconds` are skipped so an upload whose
        record is still being written is not touched.

        Returns:
            Keys that were deleted.

        Raises:
            BlobStorageError: the bucket could not be listed
            DocumentStoreError: the recorded paths could not be read
        """
        blobs = await self.blob_store.list_blobs(COOKBOOK_PREFIX)

        try:
            result = await db.execute(select(Cookbook.storage_path))
            recorded = set(result.scalars().all())
        except Exception as e:
            logger.error("Error reading cookbook paths for reconciliation: %s", str(e))
            raise DocumentStoreError(context={"error_type": type(e).__name__}) from e

        cutoff = datetime.now(timezone.utc) - timedelta(seconds=min_age_seconds)
        deleted: List[str] = []
        for blob in blobs:
            if blob.key in recorded or blob.updated_at > cutoff:
                continue
            try:
                if await self.blob_store.delete(blob.key):
                    deleted.append(blob.key)
            except BlobStorageError as e:
                logger.warning("Could not delete orphaned blob %s: %s", blob.key, e.context)

        logger.info(
            "Reconciliation complete: %d blobs scanned, %d orphans deleted",
            len(blobs),
            len(deleted),
        )
        return deleted


cookbook_service = CookbookService()
