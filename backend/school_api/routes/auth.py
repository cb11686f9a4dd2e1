"""
School API Backend — Auth Route Handlers
==========================================

What:  POST /auth/register, POST /auth/login, GET /auth/users.
How:   Parse the JSON body, delegate to AuthService, wrap the result.
       Register and login are public; the user listing sits behind the gate.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from school_api.database import get_db_session
from school_api.middleware.auth import require_auth
from school_api.schemas.auth import (
    CurrentUser,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    RegisterResponse,
    UserPublic,
)
from school_api.schemas.common import ErrorResponse
from school_api.services.auth_service import auth_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Missing fields or user already exists", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Register a new user",
)
async def register(
    body: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> RegisterResponse:
    user = await auth_service.register(db, name=body.name, email=body.email, password=body.password)
    return RegisterResponse(data=user)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        400: {"description": "Email or password missing", "model": ErrorResponse},
        401: {"description": "Wrong password", "model": ErrorResponse},
        404: {"description": "No user with this email", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Log in and receive a bearer token",
)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> LoginResponse:
    token = await auth_service.login(db, email=body.email, password=body.password)
    return LoginResponse(token=token)


@router.get(
    "/users",
    response_model=List[UserPublic],
    responses={
        401: {"description": "No token provided", "model": ErrorResponse},
        403: {"description": "Invalid or expired token", "model": ErrorResponse},
    },
    summary="List all registered users",
)
async def list_users(
    current_user: CurrentUser = Depends(require_auth),
    db: AsyncSession = Depends(get_db_session),
) -> List[UserPublic]:
    """Every account in its public shape; password hashes are never included."""
    logger.debug("User listing requested by %s", current_user.id)
    return await auth_service.list_users(db)
