"""
Meal Planner Backend - Health Check Route
=========================================

What:  GET /health for container and load balancer probes.
How:   Runs a lightweight check against each collaborator:
       document store (SELECT 1), Gemini (model listing, only when a key
       is configured), blob store (bucket directory writable).

Status levels:
    healthy:   everything reachable
    degraded:  Gemini unavailable or not configured
    unhealthy: document store or blob store down (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from mealplanner import __version__
from mealplanner.config import settings
from mealplanner.database import engine
from mealplanner.schemas.common import HealthResponse
from mealplanner.services.blob_store import blob_store
from mealplanner.services.gemini_service import gemini_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check():
    db_status = "connected"
    gemini_status = "available"
    storage_status = "writable"
    overall = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: document store unreachable: %s", str(e))

    if not await blob_store.health_check():
        storage_status = "unavailable"
        overall = "unhealthy"

    if not settings.gemini_api_key:
        gemini_status = "not_configured"
    elif not await gemini_service.health_check():
        gemini_status = "unavailable"
    if gemini_status != "available" and overall == "healthy":
        overall = "degraded"

    body = HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        gemini=gemini_status,
        storage=storage_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    return JSONResponse(
        status_code=503 if overall == "unhealthy" else 200,
        content=body.model_dump(mode="json", by_alias=True),
    )
