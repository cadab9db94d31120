"""
Thumbnail Storage Backends

Two interchangeable ways of keeping uploaded video thumbnails:
- DiskStore: writes <video_id><ext> under an assets root that the app
  serves statically at /assets
- MemoryStore: keeps the raw bytes and media type in a dict owned by the
  store object, served by GET /api/thumbnails/{video_id}

The app builds exactly one store at startup and hands it to the handlers.
"""

import logging
import mimetypes
import os
import tempfile
import time
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from fastapi import Request, UploadFile

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024  # 1 MB

EXTENSIONS_BY_MEDIA_TYPE = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}

DEFAULT_MEDIA_TYPE = "application/octet-stream"


class ThumbnailStoreError(Exception):
    """Raised when a thumbnail cannot be persisted."""


class UnsupportedThumbnailType(ThumbnailStoreError):
    """Raised when no file extension can be determined for an upload."""


@dataclass
class ThumbnailRecord:
    data: bytes
    media_type: str


def thumbnail_extension(media_type: Optional[str], filename: Optional[str]) -> str:
    """
    Pick the file extension for an uploaded thumbnail.

    Known image content types map to a fixed extension; anything else falls
    back to the extension of the uploaded filename.
    """
    extension = EXTENSIONS_BY_MEDIA_TYPE.get(media_type or "")
    if extension:
        return extension

    if filename:
        # Everything from the last dot of the base name, so ".jpg" keeps its extension
        name = os.path.basename(filename)
        dot = name.rfind(".")
        extension = name[dot:] if dot != -1 else ""
    if not extension:
        raise UnsupportedThumbnailType("Unsupported file type")
    return extension


class ThumbnailStore(ABC):

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip("/")

    @abstractmethod
    async def save(self, video_id: uuid.UUID, upload: UploadFile) -> str:
        """Persist the upload for ``video_id`` and return its public URL."""

    @abstractmethod
    def get(self, video_id: uuid.UUID) -> Optional[ThumbnailRecord]:
        """Return the stored thumbnail, or None if there is none."""


class DiskStore(ThumbnailStore):

    def __init__(self, assets_root, base_url: str):
        super().__init__(base_url)
        self.assets_root = Path(assets_root)
        self.assets_root.mkdir(parents=True, exist_ok=True)

    def thumbnail_path(self, video_id: uuid.UUID, extension: str) -> Path:
        return self.assets_root / f"{video_id}{extension}"

    def _existing_paths(self, video_id: uuid.UUID):
        return sorted(self.assets_root.glob(f"{video_id}.*"))

    async def save(self, video_id: uuid.UUID, upload: UploadFile) -> str:
        extension = thumbnail_extension(upload.content_type, upload.filename)
        dest = self.thumbnail_path(video_id, extension)

        # Dot prefix keeps the partial file out of the <video_id>.* glob
        try:
            tmp = tempfile.NamedTemporaryFile(
                dir=self.assets_root, prefix=f".{video_id}-", suffix=".part", delete=False
            )
        except OSError as e:
            logger.error(f"❌ Unable to create thumbnail file for video {video_id}: {e}")
            raise ThumbnailStoreError("Unable to create file") from e

        tmp_path = Path(tmp.name)
        size = 0
        try:
            with tmp:
                while chunk := await upload.read(CHUNK_SIZE):
                    size += len(chunk)
                    tmp.write(chunk)
            os.chmod(tmp_path, 0o644)
            os.replace(tmp_path, dest)
            # Completion time orders concurrent uploads for the same video
            finished = time.time_ns()
            os.utime(dest, ns=(finished, finished))
        except OSError as e:
            tmp_path.unlink(missing_ok=True)
            logger.error(f"❌ Unable to save thumbnail for video {video_id}: {e}")
            raise ThumbnailStoreError("Unable to save file") from e

        # Only older files go, a newer upload of another type must survive
        for stale in self._existing_paths(video_id):
            if stale == dest:
                continue
            try:
                if stale.stat().st_mtime_ns < finished:
                    stale.unlink()
            except FileNotFoundError:
                continue

        logger.info(f"💾 Wrote thumbnail {dest.name} ({size} bytes)")
        return f"{self.base_url}/assets/{dest.name}"

    def get(self, video_id: uuid.UUID) -> Optional[ThumbnailRecord]:
        paths = self._existing_paths(video_id)
        if not paths:
            return None
        newest = max(paths, key=lambda path: path.stat().st_mtime_ns)
        media_type, _ = mimetypes.guess_type(newest.name)
        return ThumbnailRecord(data=newest.read_bytes(), media_type=media_type or DEFAULT_MEDIA_TYPE)


class MemoryStore(ThumbnailStore):

    def __init__(self, base_url: str):
        super().__init__(base_url)
        self._thumbnails: Dict[uuid.UUID, ThumbnailRecord] = {}

    def __len__(self):
        return len(self._thumbnails)

    async def save(self, video_id: uuid.UUID, upload: UploadFile) -> str:
        try:
            data = await upload.read()
        except OSError as e:
            logger.error(f"❌ Unable to read thumbnail for video {video_id}: {e}")
            raise ThumbnailStoreError("Unable to read file") from e

        # Last write wins
        self._thumbnails[video_id] = ThumbnailRecord(
            data=data,
            media_type=upload.content_type or DEFAULT_MEDIA_TYPE,
        )
        logger.info(f"💾 Stored thumbnail for video {video_id} in memory ({len(data)} bytes)")
        return f"{self.base_url}/api/thumbnails/{video_id}"

    def get(self, video_id: uuid.UUID) -> Optional[ThumbnailRecord]:
        return self._thumbnails.get(video_id)


def build_thumbnail_store(kind: str, assets_root, base_url: str) -> ThumbnailStore:
    kind = (kind or "").strip().lower()
    if kind == "disk":
        return DiskStore(assets_root, base_url)
    if kind == "memory":
        return MemoryStore(base_url)
    raise ValueError(f"Unknown thumbnail storage '{kind}', expected 'disk' or 'memory'")


def get_thumbnail_store(request: Request) -> ThumbnailStore:
    """FastAPI dependency returning the store built at startup."""
    return request.app.state.thumbnail_store
