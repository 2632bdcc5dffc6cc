"""
NoteNest Backend - Note SQLAlchemy Model
==========================================

What:  ORM model representing the `notes` table.
How:   Inherits from the shared DeclarativeBase; tables are created at startup.
Who:   Used by NoteService for CRUD and by ImageService for ownership checks.

Table Design:
    - user_id: owning user; every query filters on it
    - category: free text, defaults to "General"
    - updated_at: bumped by NoteService on every update; list order key
    - images: ORM cascade plus ON DELETE CASCADE, so removing a note removes
      its image rows. Files on disk are removed by NoteService afterwards.

Index on (user_id, updated_at):
    Serves the listing query "this user's notes, most recently updated first".
"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING, List

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from notenest.database import Base

if TYPE_CHECKING:
    from notenest.models.image import Image
    from notenest.models.user import User

DEFAULT_CATEGORY = "General"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Note(Base):
    """
    A user's note.

    Lifecycle:
        1. Created by its owner (category falls back to "General")
        2. Updated field-by-field by its owner; updated_at moves forward
        3. Deleted by its owner, taking its images (rows and files) with it
    """

    __tablename__ = "notes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False, default="")

    category: Mapped[str] = mapped_column(String(100), nullable=False, default=DEFAULT_CATEGORY)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    user: Mapped["User"] = relationship(back_populates="notes")

    images: Mapped[List["Image"]] = relationship(
        back_populates="note",
        cascade="all, delete-orphan",
        order_by="Image.id",
    )

    __table_args__ = (
        Index("idx_notes_user_updated_at", "user_id", "updated_at"),
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, user_id={self.user_id}, title='{self.title}')>"
