"""
School API Backend — Auth Service (Registration & Login Orchestrator)
======================================================================

What:  Register, Login and the user listing, independent of HTTP concerns.
How:   Composes the credential store (async SQLAlchemy), the PasswordHasher
       and the TokenService. Every step raises an application exception that
       the global handlers map to a status code.
Who:   Called by the /auth route handlers and by the auth gate (user lookup).

Register flow (validation order is fixed):
    ┌──────────────┐   ┌───────────────┐   ┌──────────┐   ┌──────────────┐
    │ Required     │──▶│ Email already │──▶│  bcrypt  │──▶│ INSERT user  │
    │ fields       │   │ registered?   │   │  hash    │   │ (UNIQUE)     │
    └──────────────┘   └───────────────┘   └──────────┘   └──────────────┘
     MissingFields      DuplicateUser                      DuplicateUser on
                                                           constraint race

Login flow:
    required fields → lookup by email → bcrypt verify → issue token
     MissingFields     UserNotFound      InvalidCredentials

Email policy:
    Emails are trimmed and lower-cased before every store and lookup.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from school_api.exceptions import (
    DuplicateUserError,
    InvalidCredentialsError,
    MissingFieldsError,
    StorageError,
    UserNotFoundError,
)
from school_api.models.user import User
from school_api.schemas.auth import UserPublic
from school_api.services.password_hasher import PasswordHasher, password_hasher
from school_api.services.token_service import TokenService, token_service

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    """Canonical form used as the credential-store key."""
    return email.strip().lower()


def find_missing(**fields: Optional[str]) -> List[str]:
    """Names of fields that are absent, empty, or whitespace-only."""
    return [name for name, value in fields.items() if value is None or not value.strip()]


class AuthService:
    """
    Business logic for account registration and login.

    Stateless apart from its collaborators; the database session is passed
    into every call so each request keeps its own transaction.
    """

    def __init__(self, hasher: PasswordHasher, tokens: TokenService):
        self.hasher = hasher
        self.tokens = tokens

    async def register(
        self,
        db: AsyncSession,
        name: Optional[str],
        email: Optional[str],
        password: Optional[str],
    ) -> UserPublic:
        """
        Create a new account.

        Returns:
            The public view of the created user (no password hash).

        Raises:
            MissingFieldsError: name, email or password absent/empty
            DuplicateUserError: email already registered (pre-check or UNIQUE race)
            ValidationError: password exceeds bcrypt's length limit
            StorageError: any other database failure
        """
        missing = find_missing(name=name, email=email)
        if not password:
            missing.append("password")
        if missing:
            raise MissingFieldsError(missing)

        email = normalize_email(email)

        if await self.get_user_by_email(db, email) is not None:
            logger.info("Registration rejected: %s already registered", email)
            raise DuplicateUserError()

        password_hash = await self.hasher.hash(password)

        user = User(
            id=uuid.uuid4(),
            name=name.strip(),
            email=email,
            password_hash=password_hash,
        )
        db.add(user)
        try:
            # Flush now so a UNIQUE violation surfaces here, not at commit
            await db.flush()
        except IntegrityError as e:
            logger.info("Registration lost a race for %s (unique constraint)", email)
            raise DuplicateUserError() from e
        except SQLAlchemyError as e:
            logger.error("Database error registering %s: %s", email, type(e).__name__, exc_info=True)
            raise StorageError(context={"operation": "register", "error_type": type(e).__name__}) from e

        logger.info("Registered user %s (%s)", user.email, user.id)
        return UserPublic.model_validate(user)

    async def login(
        self,
        db: AsyncSession,
        email: Optional[str],
        password: Optional[str],
    ) -> str:
        """
        Check credentials and issue an access token.

        Returns:
            Signed token carrying the user's id and email.

        Raises:
            MissingFieldsError: email or password absent/empty
            UserNotFoundError: no account with that email
            InvalidCredentialsError: password does not match
            StorageError: database failure during lookup
        """
        missing = find_missing(email=email)
        if not password:
            missing.append("password")
        if missing:
            raise MissingFieldsError(missing, message="Email and password are required")

        email = normalize_email(email)
        user = await self.get_user_by_email(db, email)
        if user is None:
            logger.info("Login failed: no user for %s", email)
            raise UserNotFoundError()

        if not await self.hasher.verify(password, user.password_hash):
            logger.warning("Login failed: wrong password for user %s", user.id)
            raise InvalidCredentialsError()

        token = self.tokens.issue(user.id, user.email)
        logger.info("Login: %s (%s)", user.email, user.id)
        return token

    async def list_users(self, db: AsyncSession) -> List[UserPublic]:
        """All accounts, oldest first, in their public shape."""
        try:
            result = await db.execute(select(User).order_by(User.created_at))
            users = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Database error listing users: %s", type(e).__name__, exc_info=True)
            raise StorageError(context={"operation": "list_users", "error_type": type(e).__name__}) from e
        return [UserPublic.model_validate(user) for user in users]

    async def get_user_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        """Lookup by an already-normalised email."""
        try:
            result = await db.execute(select(User).where(User.email == email))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error looking up %s: %s", email, type(e).__name__, exc_info=True)
            raise StorageError(context={"operation": "get_user_by_email", "error_type": type(e).__name__}) from e

    async def get_user_by_id(self, db: AsyncSession, user_id: uuid.UUID) -> Optional[User]:
        """Lookup by primary key; used by the store-validated auth gate."""
        try:
            return await db.get(User, user_id)
        except SQLAlchemyError as e:
            logger.error("Database error loading user %s: %s", user_id, type(e).__name__, exc_info=True)
            raise StorageError(context={"operation": "get_user_by_id", "error_type": type(e).__name__}) from e


# ── Singleton Instance ────────────────────────────────────────────────────
auth_service = AuthService(hasher=password_hasher, tokens=token_service)
