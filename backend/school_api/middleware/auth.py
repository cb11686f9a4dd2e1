"""
School API Backend — Authenticate-Request Gate
================================================

What:  FastAPI dependency that admits a request only with a valid bearer token.
How:   Reads the Authorization header, verifies the token with TokenService and
       resolves the caller according to AUTH_TRUST_MODEL:
           store   the user named by the token is re-loaded from the database;
                   a deleted account is refused (403) from its next request
           claims  the verified token payload is trusted as the identity
       The resolved CurrentUser is attached to request.state.user and returned.
Who:   Attached to protected routers: dependencies=[Depends(require_auth)],
       or taken as a parameter when the handler needs the caller.

Outcomes:
    no / blank header                        → NoTokenError       (401)
    bad signature, malformed, expired token  → InvalidTokenError  (403)
    store model, user no longer exists       → InvalidTokenError  (403)
"""

import logging
from typing import Optional

from fastapi import Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from school_api.config import settings
from school_api.database import get_db_session
from school_api.exceptions import InvalidTokenError, NoTokenError
from school_api.schemas.auth import CurrentUser
from school_api.services.auth_service import AuthService, auth_service
from school_api.services.token_service import TokenService, token_service

logger = logging.getLogger(__name__)

BEARER_SCHEME = "bearer"

# Registers the bearer scheme in OpenAPI; the header itself is parsed below
# because a bare token without the "Bearer " prefix is also accepted.
bearer_scheme = HTTPBearer(auto_error=False, description="Token returned by POST /auth/login")


class AuthGate:
    """Callable dependency; one instance per trust model."""

    def __init__(self, tokens: TokenService, users: AuthService, trust_model: str = "store"):
        if trust_model not in ("store", "claims"):
            raise ValueError(f"Unknown trust model: {trust_model!r}")
        self.tokens = tokens
        self.users = users
        self.trust_model = trust_model

    @staticmethod
    def extract_token(header_value: Optional[str]) -> Optional[str]:
        """Token from an Authorization header value, or None when there is none."""
        if header_value is None:
            return None
        value = header_value.strip()
        scheme, _, rest = value.partition(" ")
        if scheme.lower() == BEARER_SCHEME:
            value = rest.strip()
        return value or None

    async def __call__(
        self,
        request: Request,
        _credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
        db: AsyncSession = Depends(get_db_session),
    ) -> CurrentUser:
        token = self.extract_token(request.headers.get("Authorization"))
        if token is None:
            logger.info("Rejected %s %s: no token", request.method, request.url.path)
            raise NoTokenError()

        try:
            claims = self.tokens.verify(token)
        except InvalidTokenError as e:
            logger.info("Rejected %s %s: token %s", request.method, request.url.path, e.reason)
            raise

        if self.trust_model == "store":
            user = await self.users.get_user_by_id(db, claims.user_id)
            if user is None:
                logger.info("Rejected token for deleted user %s", claims.user_id)
                raise InvalidTokenError(reason="unknown_user")
            current = CurrentUser(id=user.id, email=user.email, name=user.name)
        else:
            current = CurrentUser(id=claims.user_id, email=claims.email)

        request.state.user = current
        return current


# ── Singleton Instance ────────────────────────────────────────────────────
require_auth = AuthGate(
    tokens=token_service,
    users=auth_service,
    trust_model=settings.auth_trust_model,
)
