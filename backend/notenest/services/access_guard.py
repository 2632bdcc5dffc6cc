"""
NoteNest Backend - Access Guard
=================================

What:  Gate in front of every protected route. Pulls the bearer token out of
       the Authorization header and verifies it.
How:   authenticate() returns a value, never raises for a denial:
           Identity  → the caller, as claimed by the token
           Denial    → why access was refused (missing vs invalid token)
       routes.dependencies.get_current_identity turns a Denial into the
       matching AuthError for the HTTP layer. A server without JWT_SECRET
       cannot verify anything, so that case still raises InternalError.
Who:   Composed before every route except register, login and health.

The guard performs no database lookup: the token's claims as of issuance
are trusted for the token's whole lifetime.

Header format:
    Authorization: Bearer <token>
    The token is the second whitespace-separated segment; a header with no
    second segment counts as a missing token.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from notenest.exceptions import AuthError, InvalidTokenError, MissingTokenError
from notenest.services.token_service import Identity, TokenService, token_service

logger = logging.getLogger(__name__)

MISSING_TOKEN = "missing_token"
INVALID_TOKEN = "invalid_token"


@dataclass(frozen=True)
class Denial:
    kind: str
    reason: Optional[str] = None

    def to_error(self) -> AuthError:
        if self.kind == MISSING_TOKEN:
            return MissingTokenError()
        return InvalidTokenError(reason=self.reason)


GuardResult = Union[Identity, Denial]


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    parts = authorization.split()
    if len(parts) < 2:
        return None
    return parts[1]


class AccessGuard:
    def __init__(self, tokens: Optional[TokenService] = None):
        self.tokens = tokens or token_service

    def authenticate(self, authorization: Optional[str]) -> GuardResult:
        token = extract_bearer_token(authorization)
        if token is None:
            return Denial(kind=MISSING_TOKEN)

        try:
            return self.tokens.verify(token)
        except InvalidTokenError as e:
            reason = e.context.get("reason")
            logger.info("Rejected bearer token: %s", reason)
            return Denial(kind=INVALID_TOKEN, reason=reason)


access_guard = AccessGuard()
