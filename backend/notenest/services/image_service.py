"""
NoteNest Backend - Image Service
==================================

What:  Attaches uploaded images to notes and removes them again.
How:   The file is written through FileStorage, the metadata row through the
       database session. The two are kept in step by ordering and cleanup:

Upload Flow:
    ┌────────────┐   ┌────────────┐   ┌─────────────┐   ┌──────────────┐
    │  Validate  │──▶│ Write file │──▶│ Owner check │──▶│ INSERT+COMMIT│
    │ mime, size │   │ (storage)  │   │  (notes)    │   │   (images)   │
    └────────────┘   └────────────┘   └─────────────┘   └──────────────┘

    Validation failures happen before anything is written.
    Any failure after the write removes the file before the error propagates,
    so a rejected upload never leaves a file behind and no row ever points
    at a missing file.

Delete Flow:
    Image resolved through its note's owner → DELETE + COMMIT → remove file
    if it is still there.

Stored names:
    image-<epoch milliseconds>-<random 0..1e9><original extension>
    Nothing from the original filename survives except its extension.
"""

import logging
import random
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from notenest.config import settings
from notenest.exceptions import (
    DatabaseError,
    FileStorageError,
    FileTooLargeError,
    NoFileError,
    NoteNestError,
    NotAnImageError,
    NotFoundError,
)
from notenest.models.image import Image
from notenest.models.note import Note
from notenest.services.note_service import is_storable_id, owned_note_query
from notenest.services.storage import FileStorage

logger = logging.getLogger(__name__)

# Public URL prefix of the upload directory (see main.create_app static mount)
PUBLIC_PREFIX = "uploads"

UPLOAD_FIELD = "image"


@dataclass
class ImageUpload:
    """A received multipart file, already read into memory."""

    original_filename: str
    content_type: Optional[str]
    content: bytes
    field_name: str = UPLOAD_FIELD

    @property
    def size(self) -> int:
        return len(self.content)


class ImageService:
    def __init__(self, storage: FileStorage, max_size: Optional[int] = None):
        self.storage = storage
        self.max_size = max_size or settings.max_upload_size

    def validate_upload(self, upload: ImageUpload) -> None:
        """
        Reject an upload before anything is written.

        Raises:
            NotAnImageError:   declared mime type does not start with "image/"
            FileTooLargeError: more than max_size bytes
        """
        if not (upload.content_type or "").startswith("image/"):
            raise NotAnImageError(upload.content_type)
        if upload.size > self.max_size:
            raise FileTooLargeError(self.max_size, upload.size)

    @staticmethod
    def generate_filename(upload: ImageUpload) -> str:
        extension = Path(upload.original_filename or "").suffix
        unique_suffix = f"{int(time.time() * 1000)}-{random.randint(0, 1_000_000_000)}"
        return f"{upload.field_name}-{unique_suffix}{extension}"

    async def upload_image(
        self,
        db: AsyncSession,
        user_id: int,
        note_id: int,
        upload: Optional[ImageUpload],
    ) -> Image:
        """
        Store an uploaded image and attach it to one of the caller's notes.

        Raises:
            NotAnImageError / FileTooLargeError: before any write
            NotFoundError: note missing or owned by another user
            NoFileError:   request carried no file
            FileStorageError / DatabaseError: write or insert failed
        """
        stored_name: Optional[str] = None
        if upload is not None:
            self.validate_upload(upload)
            stored_name = self.generate_filename(upload)
            await self.storage.put(stored_name, upload.content)

        try:
            note: Optional[Note] = None
            if is_storable_id(note_id):
                result = await db.execute(owned_note_query(user_id, note_id))
                note = result.scalar_one_or_none()
            if note is None:
                raise NotFoundError(resource="note", resource_id=note_id)

            if upload is None or stored_name is None:
                raise NoFileError()

            image = Image(
                filename=stored_name,
                path=f"{PUBLIC_PREFIX}/{stored_name}",
                mimetype=upload.content_type,
                size=upload.size,
            )
            note.images.append(image)
            await db.flush()
            await db.commit()

        except Exception as e:
            if stored_name is not None:
                await self._discard(stored_name)
            if isinstance(e, NoteNestError):
                raise
            if isinstance(e, SQLAlchemyError):
                logger.error("Database error saving image for note %s: %s", note_id, str(e))
                raise DatabaseError(
                    message="Could not save the image. Please try again.",
                    context={"error_type": type(e).__name__},
                ) from e
            raise

        logger.info(
            "Image uploaded: id=%s note_id=%s file=%s (%d bytes)",
            image.id,
            note_id,
            stored_name,
            image.size,
        )
        return image

    async def delete_image(self, db: AsyncSession, user_id: int, image_id: int) -> None:
        """
        Delete an image row, then its file.

        Raises:
            NotFoundError: image missing or its note owned by another user
        """
        image: Optional[Image] = None
        if is_storable_id(image_id):
            result = await db.execute(
                select(Image)
                .join(Note, Image.note_id == Note.id)
                .where(Image.id == image_id, Note.user_id == user_id)
            )
            image = result.scalar_one_or_none()
        if image is None:
            raise NotFoundError(resource="image", resource_id=image_id)

        filename = image.filename
        await db.delete(image)
        await db.flush()
        await db.commit()
        logger.info("Image deleted: id=%s", image_id)

        try:
            await self.storage.delete(filename)
        except FileStorageError as e:
            logger.warning(
                "Image %s deleted but file %s could not be removed: %s",
                image_id,
                filename,
                e.context.get("os_error", e.message),
            )

    async def _discard(self, stored_name: str) -> None:
        """Remove a file written for a request that is failing."""
        try:
            await self.storage.delete(stored_name)
        except FileStorageError as e:
            logger.error(
                "Could not remove %s after a failed upload: %s",
                stored_name,
                e.context.get("os_error", e.message),
            )
