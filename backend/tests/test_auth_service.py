"""
School API Backend — Auth Service Unit Tests
==============================================

What:  Register/login business rules against a mocked AsyncSession.

What we test:
    ✅ Registration stores a normalised email and a hash, never the password
    ✅ Missing fields, duplicate email and the UNIQUE-constraint race
    ✅ Login: token issued, unknown user, wrong password, missing fields
    ✅ Database failures surface as StorageError
"""

import uuid
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from conftest import result_with
from school_api.exceptions import (
    DuplicateUserError,
    InvalidCredentialsError,
    MissingFieldsError,
    StorageError,
    UserNotFoundError,
)
from school_api.models.user import User
from school_api.services.auth_service import AuthService, find_missing, normalize_email
from school_api.services.password_hasher import PasswordHasher
from school_api.services.token_service import TokenService

SECRET = "unit-test-secret-key-with-32-plus-bytes"


def make_service() -> AuthService:
    return AuthService(hasher=PasswordHasher(rounds=4), tokens=TokenService(secret=SECRET))


class TestHelpers:

    def test_normalize_email(self):
        assert normalize_email("  Ann@X.COM ") == "ann@x.com"

    def test_find_missing(self):
        assert find_missing(name="Ann", email=None) == ["email"]
        assert find_missing(name="   ", email="a@b.c") == ["name"]
        assert find_missing(name="Ann", email="a@b.c") == []


class TestRegister:

    def setup_method(self):
        self.service = make_service()

    @pytest.mark.asyncio
    async def test_register_success(self, mock_db_session):
        result = await self.service.register(mock_db_session, "Ann", " Ann@X.com ", "secret1")

        assert result.name == "Ann"
        assert result.email == "ann@x.com"
        assert isinstance(result.id, uuid.UUID)

        stored = mock_db_session.add.call_args[0][0]
        assert isinstance(stored, User)
        assert stored.email == "ann@x.com"
        assert stored.password_hash != "secret1"
        assert await self.service.hasher.verify("secret1", stored.password_hash)
        mock_db_session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_public_result_has_no_hash(self, mock_db_session):
        result = await self.service.register(mock_db_session, "Ann", "ann@x.com", "secret1")
        assert set(result.model_dump()) == {"id", "name", "email"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "name,email,password,missing",
        [
            ("Ann", "ann@x.com", None, ["password"]),
            ("Ann", "ann@x.com", "", ["password"]),
            (None, "ann@x.com", "secret1", ["name"]),
            ("Ann", "   ", "secret1", ["email"]),
            (None, None, None, ["name", "email", "password"]),
        ],
    )
    async def test_register_missing_fields(self, mock_db_session, name, email, password, missing):
        with pytest.raises(MissingFieldsError) as exc_info:
            await self.service.register(mock_db_session, name, email, password)
        assert exc_info.value.fields == missing
        assert exc_info.value.message == "All fields are required"
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_register_duplicate_email(self, mock_db_session):
        existing = User(id=uuid.uuid4(), name="Ann", email="ann@x.com", password_hash="x")
        mock_db_session.execute.return_value = result_with(existing)

        with pytest.raises(DuplicateUserError) as exc_info:
            await self.service.register(mock_db_session, "Other Ann", "ANN@x.com", "pw")
        assert exc_info.value.message == "User already exists"
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_register_unique_constraint_race(self, mock_db_session):
        """Both requests pass the pre-check; the constraint rejects the second insert."""
        mock_db_session.flush = AsyncMock(
            side_effect=IntegrityError("INSERT INTO users", {}, Exception("UNIQUE constraint failed"))
        )
        with pytest.raises(DuplicateUserError):
            await self.service.register(mock_db_session, "Ann", "ann@x.com", "secret1")

    @pytest.mark.asyncio
    async def test_register_database_failure(self, mock_db_session):
        mock_db_session.flush = AsyncMock(
            side_effect=OperationalError("INSERT INTO users", {}, Exception("disk I/O error"))
        )
        with pytest.raises(StorageError) as exc_info:
            await self.service.register(mock_db_session, "Ann", "ann@x.com", "secret1")
        assert "disk" not in exc_info.value.message


class TestLogin:

    def setup_method(self):
        self.service = make_service()

    async def _stored_ann(self) -> User:
        return User(
            id=uuid.uuid4(),
            name="Ann",
            email="ann@x.com",
            password_hash=await self.service.hasher.hash("secret1"),
        )

    @pytest.mark.asyncio
    async def test_login_success_issues_token(self, mock_db_session):
        ann = await self._stored_ann()
        mock_db_session.execute.return_value = result_with(ann)

        token = await self.service.login(mock_db_session, "ann@x.com", "secret1")

        claims = self.service.tokens.verify(token)
        assert claims.user_id == ann.id
        assert claims.email == "ann@x.com"

    @pytest.mark.asyncio
    async def test_login_unknown_user(self, mock_db_session):
        with pytest.raises(UserNotFoundError) as exc_info:
            await self.service.login(mock_db_session, "nobody@x.com", "secret1")
        assert exc_info.value.message == "User not found"
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, mock_db_session):
        mock_db_session.execute.return_value = result_with(await self._stored_ann())
        with pytest.raises(InvalidCredentialsError) as exc_info:
            await self.service.login(mock_db_session, "ann@x.com", "wrong")
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    @pytest.mark.parametrize("email,password", [(None, "secret1"), ("ann@x.com", None), ("", "")])
    async def test_login_missing_fields(self, mock_db_session, email, password):
        with pytest.raises(MissingFieldsError) as exc_info:
            await self.service.login(mock_db_session, email, password)
        assert exc_info.value.message == "Email and password are required"
        mock_db_session.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_login_lookup_failure(self, mock_db_session):
        mock_db_session.execute = AsyncMock(
            side_effect=OperationalError("SELECT", {}, Exception("connection refused"))
        )
        with pytest.raises(StorageError):
            await self.service.login(mock_db_session, "ann@x.com", "secret1")
