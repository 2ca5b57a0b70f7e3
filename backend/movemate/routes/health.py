"""
MoveMate Backend — Health Check Route
======================================

What:  Liveness probe for Docker and load balancers.
How:   Runs SELECT 1 through the engine. The database is the only hard
       dependency, so the service is either healthy (200) or unhealthy (503).
"""

import logging
import time

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from movemate import __version__
from movemate.database import engine
from movemate.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


async def check_database() -> bool:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Health check: database unreachable: %s", str(e))
        return False
    return True


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check():
    healthy = await check_database()
    body = HealthResponse(
        status="healthy" if healthy else "unhealthy",
        version=__version__,
        database="connected" if healthy else "disconnected",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if not healthy:
        return JSONResponse(status_code=503, content=body.model_dump())
    return body
