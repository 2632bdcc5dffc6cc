"""
NoteNest Backend - Health Check Route
=======================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Probes the database with SELECT 1 and the upload directory for write
       access, then reports an aggregate status.
Who:   Called by container health checks and load balancers.

Status levels:
    - healthy:   database reachable and upload directory writable (HTTP 200)
    - unhealthy: either dependency unavailable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text

from notenest import __version__
from notenest.database import engine
from notenest.routes.dependencies import get_file_storage
from notenest.schemas.note import HealthResponse
from notenest.services.storage import FileStorage, LocalFileStorage

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "A dependency is unavailable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(storage: FileStorage = Depends(get_file_storage)):
    db_status = "connected"
    storage_status = "writable"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        logger.warning("Health check: database unreachable: %s", str(e))

    if isinstance(storage, LocalFileStorage) and not storage.is_writable():
        storage_status = "unavailable"
        logger.warning("Health check: upload directory not writable: %s", storage.root)

    healthy = db_status == "connected" and storage_status == "writable"
    report = HealthResponse(
        status="healthy" if healthy else "unhealthy",
        version=__version__,
        database=db_status,
        storage=storage_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    return JSONResponse(status_code=200 if healthy else 503, content=report.model_dump())
