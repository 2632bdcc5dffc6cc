"""
NoteNest Backend - Auth Route Handlers
========================================

What:  POST /api/auth/register and POST /api/auth/login.
Who:   The only /api routes that do not require a bearer token.
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from notenest.database import get_db_session
from notenest.routes.dependencies import get_auth_service
from notenest.schemas.auth import AuthResponse, LoginRequest, RegisterRequest
from notenest.schemas.note import ErrorResponse
from notenest.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/register",
    status_code=201,
    response_model=AuthResponse,
    responses={
        201: {"description": "User created and signed in", "model": AuthResponse},
        400: {"description": "Email or username already exists", "model": ErrorResponse},
    },
    summary="Register a new user",
)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
    service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    result = await service.register(
        db,
        username=body.username,
        email=body.email,
        password=body.password,
    )
    return AuthResponse.build("User registered successfully", result.token, result.user)


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={
        200: {"description": "Signed in", "model": AuthResponse},
        400: {"description": "Invalid email or password", "model": ErrorResponse},
    },
    summary="Log in with email and password",
)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
    service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    result = await service.login(db, email=body.email, password=body.password)
    return AuthResponse.build("Logged in successfully", result.token, result.user)
