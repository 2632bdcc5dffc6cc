"""
NoteNest Backend - Image Route Handlers
=========================================

What:  POST /api/notes/{note_id}/images (multipart field "image") and
       DELETE /api/images/{image_id}.
How:   The upload handler reads at most MAX_UPLOAD_SIZE + 1 bytes, enough to
       tell an oversized file apart without holding all of it in memory,
       then hands the payload to ImageService.

Request Flow (upload):
    1. Client sends multipart/form-data with an "image" file field
    2. Payload read (bounded) into an ImageUpload
    3. ImageService validates, writes, checks ownership, inserts
    4. 201 with the stored image and its absolute URL
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from notenest.database import get_db_session
from notenest.routes.dependencies import get_current_identity, get_image_service
from notenest.schemas.note import (
    ErrorResponse,
    ImageResponse,
    ImageUploadResponse,
    MessageResponse,
)
from notenest.services.image_service import UPLOAD_FIELD, ImageService, ImageUpload
from notenest.services.token_service import Identity

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["Images"],
    responses={
        401: {"description": "No bearer token", "model": ErrorResponse},
        403: {"description": "Invalid bearer token", "model": ErrorResponse},
    },
)


async def read_upload(file: Optional[UploadFile], max_size: int) -> Optional[ImageUpload]:
    if file is None:
        return None
    try:
        content = await file.read(max_size + 1)
    finally:
        await file.close()
    return ImageUpload(
        original_filename=file.filename or "",
        content_type=file.content_type,
        content=content,
        field_name=UPLOAD_FIELD,
    )


@router.post(
    "/notes/{note_id}/images",
    status_code=201,
    response_model=ImageUploadResponse,
    responses={
        400: {"description": "Not an image, or no file", "model": ErrorResponse},
        404: {"description": "Note not found", "model": ErrorResponse},
        413: {"description": "File larger than the upload limit", "model": ErrorResponse},
    },
    summary="Attach an image to a note",
)
async def upload_image(
    note_id: int,
    request: Request,
    image: Optional[UploadFile] = File(default=None, description="Image file (max 5MB)"),
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
    service: ImageService = Depends(get_image_service),
) -> ImageUploadResponse:
    upload = await read_upload(image, service.max_size)
    logger.info(
        "Received image upload for note %s: filename=%s, size=%s",
        note_id,
        upload.original_filename if upload else None,
        upload.size if upload else None,
    )

    stored = await service.upload_image(db, identity.user_id, note_id, upload)
    return ImageUploadResponse(image=ImageResponse.from_image(stored, str(request.base_url)))


@router.delete(
    "/images/{image_id}",
    response_model=MessageResponse,
    responses={404: {"description": "Image not found", "model": ErrorResponse}},
    summary="Delete an image",
)
async def delete_image(
    image_id: int,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
    service: ImageService = Depends(get_image_service),
) -> MessageResponse:
    await service.delete_image(db, identity.user_id, image_id)
    return MessageResponse(message="Image deleted successfully")
