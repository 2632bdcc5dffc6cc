"""Password hashing with bcrypt."""

from typing import Optional

import bcrypt

from notenest.config import settings

# bcrypt only looks at the first 72 bytes; newer releases raise instead of
# truncating, so both hashing and checking cut at the same boundary.
_BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    """Hash with a fresh random salt; cost factor from settings.bcrypt_rounds."""
    salt = bcrypt.gensalt(rounds=rounds or settings.bcrypt_rounds)
    return bcrypt.hashpw(_encode(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode("utf-8"))
    except ValueError:
        # malformed stored hash
        return False
