"""
NoteNest Backend - Route Dependencies
=======================================

What:  FastAPI dependencies shared by the route modules: the access guard,
       the file storage, and the services built on top of it.
How:   Each dependency is a plain function so tests can swap any of them
       through app.dependency_overrides (e.g. an in-memory FileStorage).
"""

from typing import Optional

from fastapi import Depends, Header

from notenest.services.access_guard import AccessGuard, Denial, access_guard
from notenest.services.auth_service import AuthService, auth_service
from notenest.services.image_service import ImageService
from notenest.services.note_service import NoteService
from notenest.services.storage import FileStorage, get_default_storage
from notenest.services.token_service import Identity


def get_file_storage() -> FileStorage:
    return get_default_storage()


def get_access_guard() -> AccessGuard:
    return access_guard


def get_auth_service() -> AuthService:
    return auth_service


def get_note_service(storage: FileStorage = Depends(get_file_storage)) -> NoteService:
    return NoteService(storage)


def get_image_service(storage: FileStorage = Depends(get_file_storage)) -> ImageService:
    return ImageService(storage)


async def get_current_identity(
    authorization: Optional[str] = Header(default=None),
    guard: AccessGuard = Depends(get_access_guard),
) -> Identity:
    """
    Guard dependency for protected routes.

    Raises:
        MissingTokenError (401): no Authorization header or no token segment
        InvalidTokenError (403): token failed verification
    """
    result = guard.authenticate(authorization)
    if isinstance(result, Denial):
        raise result.to_error()
    return result
