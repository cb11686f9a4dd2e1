"""
School API Backend — Password Hasher
======================================

What:  One-way salted password hashing and verification with bcrypt.
How:   bcrypt.hashpw with a per-hash random salt and a configurable work
       factor; bcrypt.checkpw for constant-time verification.
Who:   Used by AuthService during registration and login.

Concurrency:
    bcrypt is deliberately CPU-expensive (~50-100ms at 10 rounds). Both
    operations run in Starlette's threadpool so a hash in one request does
    not stall every other coroutine on the event loop.

Length limit:
    bcrypt only looks at the first 72 bytes of its input. Longer passwords
    are rejected instead of silently truncated.
"""

import logging

import bcrypt
from starlette.concurrency import run_in_threadpool

from school_api.config import settings
from school_api.exceptions import ValidationError

logger = logging.getLogger(__name__)

MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """bcrypt hasher bound to a work factor."""

    def __init__(self, rounds: int = 10):
        self.rounds = rounds

    async def hash(self, password: str) -> str:
        """
        Hash a plaintext password.

        Returns:
            The bcrypt hash as text (includes algorithm, cost and salt).

        Raises:
            ValidationError: password longer than 72 bytes once UTF-8 encoded.
        """
        encoded = password.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            raise ValidationError(
                message=f"Password must be at most {MAX_PASSWORD_BYTES} bytes long",
                field="password",
            )
        return await run_in_threadpool(self._hash_sync, encoded)

    async def verify(self, password: str, password_hash: str) -> bool:
        """Constant-time check of `password` against a stored bcrypt hash."""
        return await run_in_threadpool(self._verify_sync, password, password_hash)

    def _hash_sync(self, encoded: bytes) -> str:
        return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self.rounds)).decode("ascii")

    @staticmethod
    def _verify_sync(password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("ascii"))
        except (ValueError, TypeError, UnicodeEncodeError):
            # Malformed stored hash or over-long password: never a match
            logger.warning("Password verification rejected malformed input")
            return False


# ── Singleton Instance ────────────────────────────────────────────────────
password_hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
