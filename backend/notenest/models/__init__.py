"""ORM models; importing this package registers every table with Base.metadata."""

from notenest.models.user import User
from notenest.models.note import Note
from notenest.models.image import Image

__all__ = ["User", "Note", "Image"]
