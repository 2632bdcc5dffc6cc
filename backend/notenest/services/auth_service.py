"""
NoteNest Backend - Auth Gateway
=================================

What:  Registration and login against the users table.
How:   Duplicate checks through one combined query, bcrypt hashing in the
       threadpool, and a fresh token from TokenService on success.
Who:   Called by the /api/auth routes, the only routes without the guard.

Registration Flow:
    1. SELECT users WHERE email = :email OR username = :username
       → email collision wins over username collision when both match
    2. Hash password (bcrypt, cost factor 10)
    3. INSERT user and commit
       → a concurrent registration can still win the race here; the unique
         constraints reject the loser and it is reported as a 400
    4. Issue token

Login Flow:
    Unknown email and wrong password raise the same InvalidCredentialsError.
    Login never invalidates previously issued tokens.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from notenest.exceptions import (
    DuplicateEmailError,
    DuplicateUsernameError,
    InvalidCredentialsError,
    ValidationError,
)
from notenest.models.user import User
from notenest.services.passwords import hash_password, verify_password
from notenest.services.token_service import TokenService, token_service

logger = logging.getLogger(__name__)


@dataclass
class AuthResult:
    token: str
    user: User


class AuthService:
    def __init__(self, tokens: Optional[TokenService] = None):
        self.tokens = tokens or token_service

    async def register(
        self,
        db: AsyncSession,
        username: str,
        email: str,
        password: str,
    ) -> AuthResult:
        """
        Create a user and sign them in.

        Raises:
            DuplicateEmailError:    email already registered (checked first)
            DuplicateUsernameError: username already taken
            ValidationError:        lost an insert race on a unique column
        """
        result = await db.execute(
            select(User).where(or_(User.email == email, User.username == username))
        )
        existing = list(result.scalars().all())
        if existing:
            if any(user.email == email for user in existing):
                raise DuplicateEmailError()
            raise DuplicateUsernameError()

        password_hash = await run_in_threadpool(hash_password, password)

        user = User(username=username, email=email, password_hash=password_hash)
        db.add(user)
        try:
            await db.flush()
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            logger.warning("Registration lost a uniqueness race: %s", type(e).__name__)
            raise ValidationError(
                message="Unable to register: email or username already exists",
                context={"error_type": type(e).__name__},
            )

        logger.info("User registered: id=%s username=%s", user.id, user.username)
        token = self.tokens.issue(user.id, user.username)
        return AuthResult(token=token, user=user)

    async def login(self, db: AsyncSession, email: str, password: str) -> AuthResult:
        """
        Check credentials and issue a fresh token.

        Raises:
            InvalidCredentialsError: unknown email or wrong password (same error)
        """
        result = await db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        if user is None:
            raise InvalidCredentialsError()

        if not await run_in_threadpool(verify_password, password, user.password_hash):
            raise InvalidCredentialsError()

        logger.info("User logged in: id=%s", user.id)
        token = self.tokens.issue(user.id, user.username)
        return AuthResult(token=token, user=user)


auth_service = AuthService()
