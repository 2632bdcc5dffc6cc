"""
NoteNest Backend - User SQLAlchemy Model
==========================================

What:  ORM model for the `users` table.
Who:   Written once by AuthService.register; read by AuthService.login.

A user row is immutable after registration: there are no update or delete
routes. Username and email are each unique; the unique constraints are the
final arbiter when two registrations race past the existence check.
"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING, List

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from notenest.database import Base

if TYPE_CHECKING:
    from notenest.models.note import Note


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    username: Mapped[str] = mapped_column(String(100), nullable=False, unique=True, index=True)

    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)

    # bcrypt hash ($2b$10$...), never the plain password
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    notes: Mapped[List["Note"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"
