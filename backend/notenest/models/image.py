"""
NoteNest Backend - Image SQLAlchemy Model
===========================================

What:  ORM model for the `images` table: metadata for a file in UPLOAD_DIR.
Who:   Written by ImageService.upload_image; removed by ImageService.delete_image
       or by the Note cascade.

Invariant: a row exists only while its file exists. ImageService writes the
file before inserting the row and removes the row before the file.
"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from notenest.database import Base

if TYPE_CHECKING:
    from notenest.models.note import Note


class Image(Base):
    __tablename__ = "images"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Generated storage name: image-<epoch ms>-<random>.<ext>
    filename: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    # Public path relative to the server root, e.g. "uploads/image-1700000000000-42.png"
    path: Mapped[str] = mapped_column(String(512), nullable=False)

    mimetype: Mapped[str] = mapped_column(String(100), nullable=False)

    # Bytes
    size: Mapped[int] = mapped_column(Integer, nullable=False)

    note_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("notes.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    note: Mapped["Note"] = relationship(back_populates="images")

    def __repr__(self) -> str:
        return f"<Image(id={self.id}, note_id={self.note_id}, filename='{self.filename}')>"
