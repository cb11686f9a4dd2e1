"""
School API Backend — Service Routes
=====================================

What:  Welcome message and health check for monitoring and load balancer probes.
How:   The health check runs SELECT 1 on the engine. The database is the only
       critical dependency, so the service is either healthy (200) or
       unhealthy (503).
"""

import logging
import time

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from school_api import __version__
from school_api.database import engine
from school_api.schemas.common import HealthResponse, MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Service"])

# Initialized once when the module loads
_start_time = time.time()


@router.get("/", response_model=MessageResponse, summary="Welcome message")
async def welcome() -> MessageResponse:
    return MessageResponse(message="Welcome to School API!")


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    responses={503: {"model": HealthResponse, "description": "Database unreachable"}},
)
async def health_check():
    """Probe the database and report aggregate status and uptime."""
    db_status = "connected"
    overall = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", type(e).__name__)

    body = HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if overall != "healthy":
        return JSONResponse(status_code=503, content=body.model_dump())
    return body
