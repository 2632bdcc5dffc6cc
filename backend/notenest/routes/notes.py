"""
NoteNest Backend - Notes Route Handlers
=========================================

What:  CRUD endpoints under /api/notes for the authenticated user.
How:   Every handler depends on get_current_identity, then delegates to
       NoteService with the caller's user id. Responses carry absolute
       image URLs built from the request's base URL.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from notenest.database import get_db_session
from notenest.routes.dependencies import get_current_identity, get_note_service
from notenest.schemas.note import (
    ErrorResponse,
    MessageResponse,
    NoteCreate,
    NoteResponse,
    NoteUpdate,
)
from notenest.services.note_service import NoteService
from notenest.services.token_service import Identity

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/notes",
    tags=["Notes"],
    responses={
        401: {"description": "No bearer token", "model": ErrorResponse},
        403: {"description": "Invalid bearer token", "model": ErrorResponse},
    },
)

_NOT_FOUND = {404: {"description": "Note not found", "model": ErrorResponse}}


@router.get("", response_model=List[NoteResponse], summary="List the caller's notes")
async def list_notes(
    request: Request,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
    service: NoteService = Depends(get_note_service),
) -> List[NoteResponse]:
    notes = await service.list_notes(db, identity.user_id)
    base_url = str(request.base_url)
    return [NoteResponse.from_note(note, base_url) for note in notes]


@router.get("/{note_id}", response_model=NoteResponse, responses=_NOT_FOUND, summary="Get one note")
async def get_note(
    note_id: int,
    request: Request,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
    service: NoteService = Depends(get_note_service),
) -> NoteResponse:
    note = await service.get_note(db, identity.user_id, note_id)
    return NoteResponse.from_note(note, str(request.base_url))


@router.post("", status_code=201, response_model=NoteResponse, summary="Create a note")
async def create_note(
    body: NoteCreate,
    request: Request,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
    service: NoteService = Depends(get_note_service),
) -> NoteResponse:
    note = await service.create_note(
        db,
        identity.user_id,
        title=body.title,
        content=body.content,
        category=body.category,
    )
    return NoteResponse.from_note(note, str(request.base_url))


@router.put("/{note_id}", response_model=NoteResponse, responses=_NOT_FOUND, summary="Update a note")
async def update_note(
    note_id: int,
    body: NoteUpdate,
    request: Request,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
    service: NoteService = Depends(get_note_service),
) -> NoteResponse:
    note = await service.update_note(
        db,
        identity.user_id,
        note_id,
        title=body.title,
        content=body.content,
        category=body.category,
    )
    return NoteResponse.from_note(note, str(request.base_url))


@router.delete(
    "/{note_id}",
    response_model=MessageResponse,
    responses=_NOT_FOUND,
    summary="Delete a note and its images",
)
async def delete_note(
    note_id: int,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
    service: NoteService = Depends(get_note_service),
) -> MessageResponse:
    await service.delete_note(db, identity.user_id, note_id)
    return MessageResponse(message="Note deleted successfully")
