"""
Meal Planner Backend - Blob Store
=================================

What:  Object storage for uploaded cookbook files.
How:   BlobStore defines the operations the Cookbook Store needs (put,
       delete, list). LocalBlobStore implements them on a filesystem
       bucket directory with async I/O via aiofiles:

           <storage_root>/
           └── <bucket>/
               ├── cookbooks/
               │   └── 1718000000000_3f9a1c2b_Salt_Fat_Acid_Heat.pdf
               └── .metadata/
                   └── cookbooks/
                       └── 1718000000000_3f9a1c2b_Salt_Fat_Acid_Heat.pdf.json

       Each blob has a JSON sidecar under `.metadata/` holding the declared
       content type and size, mirroring the per-object metadata of a managed
       object store.
Who:   CookbookService (upload, compensation, reconciliation) and GET /health.

Key rules:
    Keys are relative, '/'-separated, and may not contain empty, '.' or
    '..' segments. A key that would resolve outside the bucket is rejected
    with BlobStorageError before touching the disk.
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator, List, Optional

import aiofiles
import aiofiles.os

from mealplanner.config import settings
from mealplanner.exceptions import BlobStorageError

logger = logging.getLogger(__name__)

METADATA_DIR = ".metadata"


@dataclass
class BlobInfo:
    """Listing entry for a stored blob."""

    key: str
    size: int
    updated_at: datetime
    content_type: Optional[str] = None


class BlobStore(ABC):
    """Operations the application needs from object storage."""

    @abstractmethod
    async def put(self, key: str, data: bytes, content_type: str) -> str:
        """Write `data` under `key` and return the stored key."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete `key`. Returns False if it did not exist."""
        ...

    @abstractmethod
    async def list_blobs(self, prefix: str = "") -> List[BlobInfo]:
        """List every blob whose key starts with `prefix`."""
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        ...


def validate_key(key: str) -> str:
    """
    Check that a blob key is a clean relative path.

    Raises:
        BlobStorageError: absolute path, backslash, or empty/'.'/'..' segment.
    """
    if not key or key.startswith("/") or "\\" in key or "\x00" in key:
        raise BlobStorageError(context={"key": key, "reason": "malformed key"})
    segments = key.split("/")
    if any(seg in ("", ".", "..") for seg in segments):
        raise BlobStorageError(context={"key": key, "reason": "invalid path segment"})
    if segments[0] == METADATA_DIR:
        raise BlobStorageError(context={"key": key, "reason": "reserved prefix"})
    return key


class LocalBlobStore(BlobStore):
    """
    Filesystem-backed bucket.

    Args:
        storage_root: Override settings.storage_root (used in tests).
        bucket: Override settings.storage_bucket.
    """

    def __init__(self, storage_root: Optional[str] = None, bucket: Optional[str] = None):
        self.bucket = bucket or settings.storage_bucket
        self.bucket_root = (Path(storage_root or settings.storage_root) / self.bucket).resolve()
        logger.info("LocalBlobStore initialized at %s", self.bucket_root)

    def _path_for(self, key: str) -> Path:
        path = (self.bucket_root / validate_key(key)).resolve()
        if self.bucket_root not in path.parents:
            raise BlobStorageError(context={"key": key, "reason": "escapes bucket"})
        return path

    def _metadata_path_for(self, key: str) -> Path:
        return self.bucket_root / METADATA_DIR / f"{key}.json"

    async def put(self, key: str, data: bytes, content_type: str) -> str:
        """
        Write the bytes, then the metadata sidecar.

        Raises:
            BlobStorageError on any OS-level failure (disk full, permissions).
        """
        path = self._path_for(key)
        meta_path = self._metadata_path_for(key)

        try:
            await aiofiles.os.makedirs(path.parent, exist_ok=True)
            await aiofiles.os.makedirs(meta_path.parent, exist_ok=True)

            async with aiofiles.open(path, "wb") as f:
                await f.write(data)

            metadata = {
                "contentType": content_type,
                "size": len(data),
                "updated": datetime.now(timezone.utc).isoformat(),
            }
            async with aiofiles.open(meta_path, "w", encoding="utf-8") as f:
                await f.write(json.dumps(metadata))

        except OSError as e:
            logger.error("Failed to store blob %s: %s", key, str(e))
            raise BlobStorageError(context={"key": key, "os_error": str(e)}) from e

        logger.info("Blob stored: %s (%d bytes, %s)", key, len(data), content_type)
        return key

    async def delete(self, key: str) -> bool:
        path = self._path_for(key)
        meta_path = self._metadata_path_for(key)

        if not await aiofiles.os.path.exists(path):
            logger.debug("Delete: blob already gone: %s", key)
            return False

        try:
            await aiofiles.os.remove(path)
            if await aiofiles.os.path.exists(meta_path):
                await aiofiles.os.remove(meta_path)
        except OSError as e:
            logger.error("Failed to delete blob %s: %s", key, str(e))
            raise BlobStorageError(context={"key": key, "os_error": str(e)}) from e

        logger.info("Blob deleted: %s", key)
        return True

    async def list_blobs(self, prefix: str = "") -> List[BlobInfo]:
        """
        Walk the bucket and return blobs under `prefix`.

        The `.metadata/` tree is never listed.
        """
        if not await aiofiles.os.path.isdir(self.bucket_root):
            return []

        blobs: List[BlobInfo] = []
        try:
            async for key in self._walk_keys(self.bucket_root):
                if not key.startswith(prefix):
                    continue
                stat = await aiofiles.os.stat(self.bucket_root / key)
                blobs.append(
                    BlobInfo(
                        key=key,
                        size=stat.st_size,
                        updated_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
                        content_type=await self._read_content_type(key),
                    )
                )
        except OSError as e:
            logger.error("Failed to list blobs under %r: %s", prefix, str(e))
            raise BlobStorageError(context={"prefix": prefix, "os_error": str(e)}) from e

        return blobs

    async def _walk_keys(self, directory: Path) -> AsyncIterator[str]:
        """Yield the key of every file below `directory`, skipping `.metadata/`."""
        for name in sorted(await aiofiles.os.listdir(directory)):
            path = directory / name
            if directory == self.bucket_root and name == METADATA_DIR:
                continue
            if await aiofiles.os.path.isdir(path):
                async for key in self._walk_keys(path):
                    yield key
            else:
                yield path.relative_to(self.bucket_root).as_posix()

    async def _read_content_type(self, key: str) -> Optional[str]:
        meta_path = self._metadata_path_for(key)
        if not await aiofiles.os.path.exists(meta_path):
            return None
        try:
            async with aiofiles.open(meta_path, "r", encoding="utf-8") as f:
                return json.loads(await f.read()).get("contentType")
        except (OSError, ValueError) as e:
            logger.warning("Unreadable metadata for blob %s: %s", key, str(e))
            return None

    async def health_check(self) -> bool:
        """True if the bucket directory exists (or can be created) and is writable."""
        try:
            self.bucket_root.mkdir(parents=True, exist_ok=True)
            return os.access(self.bucket_root, os.W_OK)
        except OSError as e:
            logger.warning("Blob store health check failed: %s", str(e))
            return False


blob_store = LocalBlobStore()
