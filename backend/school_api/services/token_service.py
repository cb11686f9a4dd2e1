"""
School API Backend — Token Issuer / Verifier
==============================================

What:  Creates and verifies signed bearer tokens (JWT, HMAC-SHA256 by default).
How:   PyJWT encodes the claims {sub, email, iat, exp} with the server secret;
       decoding checks signature, expiry and the presence of required claims.
Who:   AuthService issues tokens at login; the auth gate verifies them.

Token lifecycle:
    issued → valid (until exp) → expired
    Tokens are stateless. Nothing is stored server-side, so there is no
    revocation list; see the auth gate's "store" trust model for the only
    way an outstanding token stops working before it expires.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from school_api.config import Settings, settings
from school_api.exceptions import ConfigurationError, InvalidTokenError
from school_api.schemas.auth import TokenClaims

logger = logging.getLogger(__name__)

REQUIRED_CLAIMS = ["sub", "email", "iat", "exp"]


class TokenService:
    """
    Symmetric-key JWT signer/verifier.

    Args:
        secret: HMAC key; must be non-empty
        algorithm: JWT "alg" (HS256/HS384/HS512)
        ttl_seconds: Lifetime of issued tokens
    """

    def __init__(self, secret: str, algorithm: str = "HS256", ttl_seconds: int = 3600):
        if not secret:
            raise ConfigurationError("Token signing secret must not be empty")
        self._secret = secret
        self.algorithm = algorithm
        self.ttl_seconds = ttl_seconds

    @classmethod
    def from_settings(cls, config: Settings) -> "TokenService":
        return cls(
            secret=config.jwt_secret,
            algorithm=config.jwt_algorithm,
            ttl_seconds=config.access_token_ttl_seconds,
        )

    def issue(
        self,
        user_id: uuid.UUID,
        email: str,
        *,
        issued_at: Optional[datetime] = None,
    ) -> str:
        """
        Sign a token for `user_id`.

        `issued_at` defaults to now; expiry is issued_at + ttl_seconds.
        """
        iat = issued_at or datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "email": email,
            "iat": iat,
            "exp": iat + timedelta(seconds=self.ttl_seconds),
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims:
        """
        Verify signature and expiry and return the claims.

        Raises:
            InvalidTokenError: malformed, tampered, expired, or missing claims.
                The reason is kept in the exception context for logging.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError as e:
            raise InvalidTokenError(reason="expired") from e
        except jwt.InvalidSignatureError as e:
            raise InvalidTokenError(reason="bad_signature") from e
        except jwt.MissingRequiredClaimError as e:
            raise InvalidTokenError(reason="missing_claim") from e
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(reason="malformed") from e

        try:
            return TokenClaims(
                user_id=uuid.UUID(str(payload["sub"])),
                email=str(payload["email"]),
                issued_at=int(payload["iat"]),
                expires_at=int(payload["exp"]),
            )
        except (KeyError, ValueError, TypeError) as e:
            raise InvalidTokenError(reason="bad_claims") from e


# ── Singleton Instance ────────────────────────────────────────────────────
token_service = TokenService.from_settings(settings)
