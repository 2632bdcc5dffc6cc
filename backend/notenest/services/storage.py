"""
NoteNest Backend - File Storage
=================================

What:  A small storage interface (put / delete / exists) plus the on-disk
       implementation used in production.
How:   LocalFileStorage writes and removes files under UPLOAD_DIR with
       aiofiles so disk I/O never blocks the event loop.
Who:   ImageService writes and removes image files through it; NoteService
       removes the files of a deleted note. Tests substitute an in-memory
       implementation of the same interface.

Naming:
    Storage keys are bare file names. Any directory component in a key is
    dropped before touching the disk, so a key can never address a file
    outside the storage root.
"""

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import aiofiles
import aiofiles.os

from notenest.config import settings
from notenest.exceptions import FileStorageError

logger = logging.getLogger(__name__)


class FileStorage(ABC):
    """Interface for the file side of image persistence."""

    @abstractmethod
    async def put(self, name: str, content: bytes) -> None:
        """Store `content` under `name`, replacing nothing (names are unique)."""

    @abstractmethod
    async def delete(self, name: str) -> bool:
        """Remove `name` if present. Returns False when there was nothing to remove."""

    @abstractmethod
    async def exists(self, name: str) -> bool:
        """Whether a file is stored under `name`."""


class LocalFileStorage(FileStorage):
    """
    Stores files flat in a single directory on the local file system.

    Directory Structure:
        uploads/
        ├── image-1700000000000-123456789.png
        └── image-1700000000512-987654321.jpg

    The same directory is mounted at /uploads by the application, so a stored
    file is publicly reachable at /uploads/<name>.
    """

    def __init__(self, root: Optional[str] = None):
        """
        Args:
            root: Override the storage directory (used in tests).
                  If None, uses settings.upload_dir.
        """
        self.root = Path(root or settings.upload_dir).resolve()
        self.root.mkdir(parents=True, exist_ok=True)
        logger.info("LocalFileStorage initialized with root=%s", self.root)

    def _resolve(self, name: str) -> Path:
        return self.root / Path(name).name

    async def put(self, name: str, content: bytes) -> None:
        path = self._resolve(name)
        opened = False
        try:
            async with aiofiles.open(path, "wb") as f:
                opened = True
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", path, str(e))
            if opened:
                await self._remove_partial(path)
            raise FileStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"path": str(path), "os_error": str(e)},
            )
        logger.info("File stored: %s (%d bytes)", path.name, len(content))

    async def _remove_partial(self, path: Path) -> None:
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error("Could not remove partially written %s: %s", path.name, str(e))

    async def delete(self, name: str) -> bool:
        path = self._resolve(name)
        if not await aiofiles.os.path.exists(path):
            logger.debug("Delete: file already gone: %s", path.name)
            return False
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            # removed concurrently between the check and the unlink
            return False
        except OSError as e:
            raise FileStorageError(
                message="Failed to remove stored image.",
                context={"path": str(path), "os_error": str(e)},
            )
        logger.info("File removed: %s", path.name)
        return True

    async def exists(self, name: str) -> bool:
        return await aiofiles.os.path.exists(self._resolve(name))

    def is_writable(self) -> bool:
        """Used by the health check."""
        return self.root.is_dir() and os.access(self.root, os.W_OK)


# ── Default Instance ──────────────────────────────────────────────────────
# Created lazily so importing this module never touches the file system.
_default_storage: Optional[LocalFileStorage] = None


def get_default_storage() -> LocalFileStorage:
    global _default_storage
    if _default_storage is None:
        _default_storage = LocalFileStorage()
    return _default_storage
