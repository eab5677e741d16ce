"""
Photo storage for report evidence.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Optional, Union

from mangrove_watch.core.exceptions import StorageError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredBlob:
    """Reference to an uploaded file."""
    key: str
    url: str
    size: int
    content_type: Optional[str] = None


class BlobStore(ABC):
    """Accepts uploads and returns a retrievable reference."""

    @abstractmethod
    async def upload(
        self,
        key: str,
        data: bytes,
        content_type: Optional[str] = None,
    ) -> StoredBlob:
        """Store data under key."""


class LocalBlobStore(BlobStore):
    """
    Blob store on the local filesystem.

    Files land in root_dir/key and are served from base_url/key.
    """

    def __init__(self, root_dir: Union[str, Path], base_url: str = "/uploads"):
        self.root_dir = Path(root_dir)
        self.base_url = base_url.rstrip("/")

    def _resolve(self, key: str) -> Path:
        parts = PurePosixPath(key).parts
        if not parts or key.startswith("/") or ".." in parts:
            raise StorageError(f"Invalid blob key: {key!r}")
        return self.root_dir.joinpath(*parts)

    async def upload(
        self,
        key: str,
        data: bytes,
        content_type: Optional[str] = None,
    ) -> StoredBlob:
        """
        Write a file.

        Raises:
            StorageError: On empty data, bad keys, or filesystem errors
        """
        if not data:
            raise StorageError("Cannot upload an empty file")

        path = self._resolve(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            await asyncio.to_thread(path.write_bytes, data)
        except OSError as e:
            logger.error(f"Upload of {key} failed: {e}")
            raise StorageError(f"Upload failed: {e}") from e

        logger.info(f"Stored {len(data)} bytes at {path}")
        return StoredBlob(
            key=key,
            url=f"{self.base_url}/{key}",
            size=len(data),
            content_type=content_type,
        )
