"""
School API Backend — Password Hasher Unit Tests
=================================================

What we test:
    ✅ Hash is a bcrypt string, never the plaintext
    ✅ Same password hashes differently each time (per-hash salt)
    ✅ verify accepts the right password and rejects a wrong one
    ✅ Over-long passwords are rejected, not truncated
    ✅ A corrupted stored hash never verifies
"""

import pytest

from school_api.exceptions import ValidationError
from school_api.services.password_hasher import MAX_PASSWORD_BYTES, PasswordHasher


class TestPasswordHasher:

    def setup_method(self):
        self.hasher = PasswordHasher(rounds=4)

    @pytest.mark.asyncio
    async def test_hash_is_bcrypt_not_plaintext(self):
        hashed = await self.hasher.hash("secret1")
        assert hashed != "secret1"
        assert hashed.startswith("$2b$04$")

    @pytest.mark.asyncio
    async def test_hash_is_salted(self):
        first = await self.hasher.hash("secret1")
        second = await self.hasher.hash("secret1")
        assert first != second

    @pytest.mark.asyncio
    async def test_verify_round_trip(self):
        hashed = await self.hasher.hash("secret1")
        assert await self.hasher.verify("secret1", hashed) is True
        assert await self.hasher.verify("secret2", hashed) is False

    @pytest.mark.asyncio
    async def test_multibyte_password(self):
        hashed = await self.hasher.hash("pässwörd✓")
        assert await self.hasher.verify("pässwörd✓", hashed) is True

    @pytest.mark.asyncio
    async def test_rejects_password_over_limit(self):
        with pytest.raises(ValidationError) as exc_info:
            await self.hasher.hash("a" * (MAX_PASSWORD_BYTES + 1))
        assert exc_info.value.field == "password"

    @pytest.mark.asyncio
    async def test_limit_is_measured_in_bytes(self):
        # 37 two-byte characters: 37 chars but 74 bytes
        with pytest.raises(ValidationError):
            await self.hasher.hash("é" * 37)

    @pytest.mark.asyncio
    async def test_corrupted_hash_never_verifies(self):
        assert await self.hasher.verify("secret1", "not-a-bcrypt-hash") is False
