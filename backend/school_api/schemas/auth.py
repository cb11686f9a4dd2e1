"""
School API Backend — Authentication Schemas
=============================================

What:  Request and response models for register, login, the user listing,
       and the identity the auth gate attaches to a request.

Serialization boundary:
    UserPublic is the only shape in which a user leaves the service. It is a
    strict subset of the User model: id, name, email. password_hash has no
    field here, so no response built from these schemas can carry it.

Request fields are Optional on purpose. A missing field must surface as the
API's MissingFields error (400) raised by AuthService, not as FastAPI's
generic 422.
"""

import uuid
from typing import Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class RegisterRequest(BaseModel):
    name: Optional[str] = Field(default=None, description="Display name", examples=["Ann"])
    email: Optional[str] = Field(default=None, description="Login email", examples=["ann@x.com"])
    password: Optional[str] = Field(default=None, description="Plaintext password", examples=["secret1"])


class LoginRequest(BaseModel):
    email: Optional[str] = Field(default=None, examples=["ann@x.com"])
    password: Optional[str] = Field(default=None, examples=["secret1"])


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class UserPublic(BaseModel):
    """External shape of a user account."""
    id: uuid.UUID
    name: str
    email: str

    model_config = {"from_attributes": True}


class RegisterResponse(BaseModel):
    message: str = Field(default="User registered successfully")
    data: UserPublic


class LoginResponse(BaseModel):
    message: str = Field(default="Login successful")
    token: str = Field(description="Signed bearer token; send as 'Authorization: Bearer <token>'")


# ══════════════════════════════════════════════════════════════════════════
# Request Identity
# ══════════════════════════════════════════════════════════════════════════


class TokenClaims(BaseModel):
    """Verified contents of an access token."""
    user_id: uuid.UUID
    email: str
    issued_at: int
    expires_at: int


class CurrentUser(BaseModel):
    """
    Identity attached to request.state.user by the auth gate.

    name is only known when the gate re-loads the user from the store.
    """
    id: uuid.UUID
    email: str
    name: Optional[str] = None
