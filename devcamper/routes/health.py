"""
DevCamper API — Health Check Route
===================================

What:  Liveness/readiness probe for Docker and load balancers.
How:   Runs `SELECT 1` against the engine.

    healthy     database reachable            → 200
    unhealthy   database unreachable          → 503

Not rate limited and not access-logged.
"""

import logging
import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from devcamper import __version__
from devcamper.context import AppContext
from devcamper.dependencies import get_context
from devcamper.schemas.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get("/health", response_model=HealthResponse, summary="Service health check")
async def health_check(ctx: AppContext = Depends(get_context)) -> JSONResponse:
    db_status = "connected"
    overall = "healthy"

    try:
        async with ctx.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", e)

    body = HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    return JSONResponse(
        status_code=200 if overall == "healthy" else 503,
        content=body.model_dump(),
    )
