"""
School API Backend — Token Service Unit Tests
===============================================

What we test:
    ✅ Issued tokens verify and carry the user's id and email
    ✅ Expiry is issued_at + TTL
    ✅ Expired, tampered, foreign-secret and malformed tokens are rejected
    ✅ Tokens missing required claims are rejected
    ✅ An empty secret is refused at construction
"""

import base64
import json
import uuid
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from school_api.exceptions import ConfigurationError, InvalidTokenError
from school_api.services.token_service import TokenService

SECRET = "unit-test-secret-key-with-32-plus-bytes"


def _b64url(data: dict) -> str:
    raw = json.dumps(data, separators=(",", ":")).encode()
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


class TestTokenIssueAndVerify:

    def setup_method(self):
        self.service = TokenService(secret=SECRET, ttl_seconds=3600)
        self.user_id = uuid.uuid4()

    def test_round_trip_claims(self):
        token = self.service.issue(self.user_id, "ann@x.com")
        claims = self.service.verify(token)
        assert claims.user_id == self.user_id
        assert claims.email == "ann@x.com"

    def test_expiry_is_issued_at_plus_ttl(self):
        issued = datetime.now(timezone.utc).replace(microsecond=0)
        token = self.service.issue(self.user_id, "ann@x.com", issued_at=issued)
        claims = self.service.verify(token)
        assert claims.issued_at == int(issued.timestamp())
        assert claims.expires_at - claims.issued_at == 3600

    def test_payload_uses_standard_claim_names(self):
        token = self.service.issue(self.user_id, "ann@x.com")
        payload = jwt.decode(token, options={"verify_signature": False})
        assert set(payload) == {"sub", "email", "iat", "exp"}
        assert payload["sub"] == str(self.user_id)

    def test_expired_token_rejected(self):
        two_hours_ago = datetime.now(timezone.utc) - timedelta(hours=2)
        token = self.service.issue(self.user_id, "ann@x.com", issued_at=two_hours_ago)
        with pytest.raises(InvalidTokenError) as exc_info:
            self.service.verify(token)
        assert exc_info.value.reason == "expired"
        assert exc_info.value.status_code == 403

    def test_tampered_signature_rejected(self):
        token = self.service.issue(self.user_id, "ann@x.com")
        header, payload, signature = token.split(".")
        # Change a middle character; the last one only carries padding bits
        swapped = "A" if signature[5] != "A" else "B"
        tampered = ".".join([header, payload, signature[:5] + swapped + signature[6:]])
        with pytest.raises(InvalidTokenError) as exc_info:
            self.service.verify(tampered)
        assert exc_info.value.reason == "bad_signature"

    def test_swapped_payload_rejected(self):
        token = self.service.issue(self.user_id, "ann@x.com")
        header, payload, signature = token.split(".")
        original = jwt.decode(token, options={"verify_signature": False})
        forged = _b64url({**original, "sub": str(uuid.uuid4())})
        with pytest.raises(InvalidTokenError) as exc_info:
            self.service.verify(".".join([header, forged, signature]))
        assert exc_info.value.reason == "bad_signature"

    def test_token_from_other_secret_rejected(self):
        other = TokenService(secret="another-secret-key-also-32-bytes-long")
        token = other.issue(self.user_id, "ann@x.com")
        with pytest.raises(InvalidTokenError) as exc_info:
            self.service.verify(token)
        assert exc_info.value.reason == "bad_signature"

    @pytest.mark.parametrize("garbage", ["garbage", "a.b.c", ""])
    def test_malformed_token_rejected(self, garbage):
        with pytest.raises(InvalidTokenError) as exc_info:
            self.service.verify(garbage)
        assert exc_info.value.reason == "malformed"

    def test_missing_email_claim_rejected(self):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"sub": str(self.user_id), "iat": now, "exp": now + timedelta(hours=1)},
            SECRET,
            algorithm="HS256",
        )
        with pytest.raises(InvalidTokenError) as exc_info:
            self.service.verify(token)
        assert exc_info.value.reason == "missing_claim"

    def test_non_uuid_subject_rejected(self):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {"sub": "42", "email": "ann@x.com", "iat": now, "exp": now + timedelta(hours=1)},
            SECRET,
            algorithm="HS256",
        )
        with pytest.raises(InvalidTokenError) as exc_info:
            self.service.verify(token)
        assert exc_info.value.reason == "bad_claims"


class TestTokenServiceConstruction:

    def test_empty_secret_refused(self):
        with pytest.raises(ConfigurationError):
            TokenService(secret="")

    def test_from_settings(self):
        from school_api.config import settings

        service = TokenService.from_settings(settings)
        assert service.algorithm == settings.jwt_algorithm
        assert service.ttl_seconds == settings.access_token_ttl_seconds
