"""
NoteNest Backend - Auth Service Unit Tests
============================================

What we test:
    ✅ Registration stores a bcrypt hash and returns a working token
    ✅ Duplicate email wins over duplicate username
    ✅ Lost insert race surfaces as a 400, not a 500
    ✅ Unknown email and wrong password fail identically
    ✅ Login leaves earlier tokens valid
"""

from unittest.mock import MagicMock

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from notenest.exceptions import (
    DuplicateEmailError,
    DuplicateUsernameError,
    InvalidCredentialsError,
    ValidationError,
)
from notenest.models.user import User
from notenest.services.auth_service import AuthService
from notenest.services.passwords import hash_password, verify_password
from notenest.services.token_service import token_service


class TestPasswords:
    def test_hash_is_salted_and_verifiable(self):
        first = hash_password("secret", rounds=4)
        second = hash_password("secret", rounds=4)
        assert first != second
        assert first.startswith("$2b$04$")
        assert verify_password("secret", first)
        assert not verify_password("Secret", first)

    def test_malformed_hash_does_not_verify(self):
        assert verify_password("secret", "not-a-bcrypt-hash") is False

    def test_long_passwords_compare_on_first_72_bytes(self):
        hashed = hash_password("x" * 100, rounds=4)
        assert verify_password("x" * 72, hashed)


class TestRegister:
    def setup_method(self):
        self.service = AuthService()

    @pytest.mark.asyncio
    async def test_register_creates_user_and_token(self, db_session):
        result = await self.service.register(db_session, "alice", "alice@example.com", "pw123456")

        assert result.user.id is not None
        assert result.user.password_hash != "pw123456"
        assert verify_password("pw123456", result.user.password_hash)

        identity = token_service.verify(result.token)
        assert identity.user_id == result.user.id
        assert identity.username == "alice"

    @pytest.mark.asyncio
    async def test_duplicate_email_rejected(self, db_session):
        await self.service.register(db_session, "alice", "alice@example.com", "pw")
        with pytest.raises(DuplicateEmailError) as exc_info:
            await self.service.register(db_session, "alice2", "alice@example.com", "pw")
        assert exc_info.value.message == "Email already exists"
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_duplicate_username_rejected(self, db_session):
        await self.service.register(db_session, "alice", "alice@example.com", "pw")
        with pytest.raises(DuplicateUsernameError) as exc_info:
            await self.service.register(db_session, "alice", "other@example.com", "pw")
        assert exc_info.value.message == "Username already exists"

    @pytest.mark.asyncio
    async def test_email_collision_reported_over_username_collision(self, db_session):
        """Email of one user and username of another: email wins."""
        await self.service.register(db_session, "alice", "alice@example.com", "pw")
        await self.service.register(db_session, "bob", "bob@example.com", "pw")

        with pytest.raises(DuplicateEmailError):
            await self.service.register(db_session, "alice", "bob@example.com", "pw")

    @pytest.mark.asyncio
    async def test_rejected_registration_creates_nothing(self, db_session):
        await self.service.register(db_session, "alice", "alice@example.com", "pw")
        with pytest.raises(DuplicateEmailError):
            await self.service.register(db_session, "zed", "alice@example.com", "pw")

        count = await db_session.scalar(select(func.count()).select_from(User))
        assert count == 1

    @pytest.mark.asyncio
    async def test_insert_race_reported_as_validation_error(self, mock_db_session):
        """Another request inserted the same email between check and insert."""
        empty = MagicMock()
        empty.scalars.return_value.all.return_value = []
        mock_db_session.execute.return_value = empty
        mock_db_session.flush.side_effect = IntegrityError("INSERT", {}, Exception("UNIQUE"))

        with pytest.raises(ValidationError) as exc_info:
            await self.service.register(mock_db_session, "alice", "alice@example.com", "pw")

        assert exc_info.value.status_code == 400
        mock_db_session.rollback.assert_awaited_once()


class TestLogin:
    def setup_method(self):
        self.service = AuthService()

    @pytest.mark.asyncio
    async def test_login_with_correct_credentials(self, db_session):
        registered = await self.service.register(db_session, "alice", "alice@example.com", "pw123")

        result = await self.service.login(db_session, "alice@example.com", "pw123")
        assert result.user.id == registered.user.id
        assert token_service.verify(result.token).user_id == registered.user.id

    @pytest.mark.asyncio
    async def test_unknown_email_and_wrong_password_look_the_same(self, db_session):
        await self.service.register(db_session, "alice", "alice@example.com", "pw123")

        with pytest.raises(InvalidCredentialsError) as unknown:
            await self.service.login(db_session, "nobody@example.com", "pw123")
        with pytest.raises(InvalidCredentialsError) as wrong:
            await self.service.login(db_session, "alice@example.com", "wrong")

        assert unknown.value.message == wrong.value.message == "Invalid email or password"
        assert unknown.value.status_code == wrong.value.status_code == 400

    @pytest.mark.asyncio
    async def test_login_does_not_revoke_previous_tokens(self, db_session):
        registered = await self.service.register(db_session, "alice", "alice@example.com", "pw123")
        await self.service.login(db_session, "alice@example.com", "pw123")

        assert token_service.verify(registered.token).username == "alice"
