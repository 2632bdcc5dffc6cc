"""
NoteNest Backend - Note & Image Schemas
=========================================

What:  Pydantic models defining the API contract for notes and images.
How:   FastAPI validates request bodies against these models and serializes
       responses through them.

Image URLs:
    Stored images keep a server-relative path ("uploads/<name>"). Responses
    add an absolute `url` built from the request's scheme and host, so the
    schemas are constructed with the request base URL (see from_image /
    from_note).
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from notenest.models.image import Image
from notenest.models.note import Note


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class NoteCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    content: str
    category: Optional[str] = Field(
        default=None,
        max_length=100,
        description='Defaults to "General" when omitted or empty',
    )


class NoteUpdate(BaseModel):
    """
    Partial update. Omitted, null, and empty-string fields keep their current
    value.
    """
    title: Optional[str] = Field(default=None, max_length=255)
    content: Optional[str] = None
    category: Optional[str] = Field(default=None, max_length=100)


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


def build_url(base_url: str, path: str) -> str:
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"


class ImageResponse(BaseModel):
    id: int
    filename: str
    path: str = Field(description="Server-relative path, e.g. uploads/<filename>")
    mimetype: str
    size: int = Field(description="Size in bytes")
    note_id: int
    created_at: datetime
    url: str = Field(description="Absolute URL of the stored file")

    @classmethod
    def from_image(cls, image: Image, base_url: str) -> "ImageResponse":
        return cls(
            id=image.id,
            filename=image.filename,
            path=image.path,
            mimetype=image.mimetype,
            size=image.size,
            note_id=image.note_id,
            created_at=image.created_at,
            url=build_url(base_url, image.path),
        )


class NoteResponse(BaseModel):
    id: int
    title: str
    content: str
    category: str
    user_id: int
    created_at: datetime
    updated_at: datetime
    images: List[ImageResponse] = Field(default_factory=list)

    @classmethod
    def from_note(cls, note: Note, base_url: str) -> "NoteResponse":
        return cls(
            id=note.id,
            title=note.title,
            content=note.content,
            category=note.category,
            user_id=note.user_id,
            created_at=note.created_at,
            updated_at=note.updated_at,
            images=[ImageResponse.from_image(image, base_url) for image in note.images],
        )


class ImageUploadResponse(BaseModel):
    message: str = "Image uploaded successfully"
    image: ImageResponse


class MessageResponse(BaseModel):
    message: str


class ErrorResponse(BaseModel):
    """
    Error body returned by every failing endpoint.

    Example:
        {
            "message": "Note not found",
            "request_id": "1f0c2a9e"
        }
    """
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Field-level context for 4xx errors")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="healthy or unhealthy")
    version: str
    database: str = Field(description="connected or disconnected")
    storage: str = Field(description="writable or unavailable")
    uptime_seconds: float
