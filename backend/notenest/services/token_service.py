"""
NoteNest Backend - Token Service
==================================

What:  Issues and verifies signed, time-limited identity tokens (JWT, HS256).
How:   python-jose signs the claims {id, username, iat, exp} with JWT_SECRET.
Who:   AuthService issues tokens on register/login; the access guard
       verifies them on every protected request.

Token lifecycle:
    issue()  → token valid for settings.token_ttl_seconds (1 day)
    verify() → Identity, or InvalidTokenError
    There is no refresh, rotation, or revocation: a token stays valid until
    it expires, whatever happens on the server in between.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt

from notenest.config import settings
from notenest.exceptions import InternalError, InvalidTokenError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """Authenticated caller, as claimed by a verified token."""

    user_id: int
    username: str


class TokenService:
    def __init__(
        self,
        secret: Optional[str] = None,
        algorithm: Optional[str] = None,
        ttl: Optional[timedelta] = None,
    ):
        """
        Args:
            secret/algorithm/ttl: Overrides for tests; default to settings.
        """
        self._secret = secret
        self.algorithm = algorithm or settings.jwt_algorithm
        self.ttl = ttl or timedelta(seconds=settings.token_ttl_seconds)

    @property
    def secret(self) -> str:
        secret = self._secret if self._secret is not None else settings.jwt_secret
        if not secret:
            raise InternalError(
                message="Token signing is not configured",
                context={"setting": "JWT_SECRET"},
            )
        return secret

    def issue(self, user_id: int, username: str, now: Optional[datetime] = None) -> str:
        """Sign a token for the given user. `now` is injectable for tests."""
        issued_at = now or datetime.now(timezone.utc)
        claims = {
            "id": user_id,
            "username": username,
            "iat": issued_at,
            "exp": issued_at + self.ttl,
        }
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Identity:
        """
        Decode and validate a token.

        Raises:
            InvalidTokenError: bad signature, malformed token, expired token,
                               or claims that do not describe a user.
        """
        secret = self.secret
        try:
            payload = jwt.decode(token, secret, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise InvalidTokenError(reason="expired")
        except JWTError as e:
            raise InvalidTokenError(reason=str(e))

        user_id = payload.get("id")
        username = payload.get("username")
        # bool is an int subclass; a token claiming id=true is not a user id
        if not isinstance(user_id, int) or isinstance(user_id, bool) or not isinstance(username, str):
            raise InvalidTokenError(reason="malformed claims")

        return Identity(user_id=user_id, username=username)


token_service = TokenService()
