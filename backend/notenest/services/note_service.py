"""
NoteNest Backend - Note Service
=================================

What:  CRUD over notes, always scoped to the authenticated owner.
How:   Every read goes through owned_note_query(), which filters on both the
       note id and the owner id. A note that exists but belongs to someone
       else is therefore indistinguishable from one that does not exist.
Who:   Called by the /api/notes route handlers.

Delete ordering:
    1. DELETE the note row; the ORM cascade removes its image rows
    2. COMMIT
    3. Remove each image file from storage, skipping files already gone
    The database is authoritative: a file that cannot be removed after the
    commit is logged and left behind rather than rolling anything back.

NoteService is stateless apart from its storage handle. The database session
is passed in on every call.
"""

import logging
from typing import List, Optional

from sqlalchemy import Select, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from notenest.exceptions import DatabaseError, FileStorageError, NotFoundError
from notenest.models.note import DEFAULT_CATEGORY, Note, utcnow
from notenest.services.storage import FileStorage

logger = logging.getLogger(__name__)

# Primary keys are 32-bit INTEGER columns; larger ids cannot name a row
MAX_ID = 2**31 - 1


def is_storable_id(value: int) -> bool:
    return 0 < value <= MAX_ID


def owned_note_query(user_id: int, note_id: int) -> Select:
    """
    SELECT a single note by id AND owner, with its images.

    populate_existing refreshes a note already held by the session so its
    image collection reflects rows added or removed since it was loaded.
    """
    return (
        select(Note)
        .where(Note.id == note_id, Note.user_id == user_id)
        .options(selectinload(Note.images))
        .execution_options(populate_existing=True)
    )


class NoteService:
    def __init__(self, storage: FileStorage):
        self.storage = storage

    async def list_notes(self, db: AsyncSession, user_id: int) -> List[Note]:
        """
        All notes owned by user_id, most recently updated first, with images.

        Query plan:
            SELECT * FROM notes WHERE user_id = :uid
            ORDER BY updated_at DESC, id DESC
            → uses idx_notes_user_updated_at
        """
        try:
            result = await db.execute(
                select(Note)
                .where(Note.user_id == user_id)
                .options(selectinload(Note.images))
                .order_by(Note.updated_at.desc(), Note.id.desc())
                .execution_options(populate_existing=True)
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing notes for user %s: %s", user_id, str(e))
            raise DatabaseError(
                message="Could not retrieve notes. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def get_note(self, db: AsyncSession, user_id: int, note_id: int) -> Note:
        """
        Raises:
            NotFoundError: note missing or owned by another user
        """
        note = None
        if is_storable_id(note_id):
            result = await db.execute(owned_note_query(user_id, note_id))
            note = result.scalar_one_or_none()
        if note is None:
            raise NotFoundError(resource="note", resource_id=note_id)
        return note

    async def create_note(
        self,
        db: AsyncSession,
        user_id: int,
        title: str,
        content: str,
        category: Optional[str] = None,
    ) -> Note:
        # images=[] marks the collection as loaded, so serializing the new
        # note never triggers a lazy load
        note = Note(
            user_id=user_id,
            title=title,
            content=content,
            category=category or DEFAULT_CATEGORY,
            images=[],
        )
        db.add(note)
        await db.flush()
        await db.commit()
        logger.info("Note created: id=%s user_id=%s", note.id, user_id)
        return note

    async def update_note(
        self,
        db: AsyncSession,
        user_id: int,
        note_id: int,
        title: Optional[str] = None,
        content: Optional[str] = None,
        category: Optional[str] = None,
    ) -> Note:
        """
        Partial update with "replace if truthy" semantics.

        A field that is omitted, None, or an empty string keeps its current
        value. Clearing a field through this operation is not possible.

        Raises:
            NotFoundError: note missing or owned by another user
        """
        note = await self.get_note(db, user_id, note_id)

        if title:
            note.title = title
        if content:
            note.content = content
        if category:
            note.category = category
        note.updated_at = utcnow()

        await db.flush()
        await db.commit()
        logger.info("Note updated: id=%s", note.id)
        return note

    async def delete_note(self, db: AsyncSession, user_id: int, note_id: int) -> None:
        """
        Delete a note, its image rows, then its image files.

        Raises:
            NotFoundError: note missing or owned by another user
        """
        note = await self.get_note(db, user_id, note_id)
        filenames = [image.filename for image in note.images]

        await db.delete(note)
        await db.flush()
        await db.commit()
        logger.info("Note deleted: id=%s (%d images)", note_id, len(filenames))

        for filename in filenames:
            try:
                await self.storage.delete(filename)
            except FileStorageError as e:
                logger.warning(
                    "Note %s deleted but image file %s could not be removed: %s",
                    note_id,
                    filename,
                    e.context.get("os_error", e.message),
                )
