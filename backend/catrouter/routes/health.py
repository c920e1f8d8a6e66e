"""
CatRouter - Health Check Route
==============================

What:  Health check endpoint for monitoring and container health checks.
How:   Reports which route modules are mounted on the host and whether the
       upload directory is writable.
Who:   Called by Docker health checks, load balancers, and monitoring systems.

Status levels:
    - healthy:  cat router mounted and, when uploads are enabled, upload dir writable
    - degraded: anything else (still HTTP 200, flagged for monitoring)
"""

import logging
import os
import time

from fastapi import APIRouter, Request

from catrouter import __version__
from catrouter.schemas.cat import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(request: Request) -> HealthResponse:
    host = request.app.state.host
    cat_router = request.app.state.cat_router
    modules = host.mounts()

    overall = "healthy"
    if not cat_router.loaded:
        overall = "degraded"

    upload_dir = None
    writable = False
    if cat_router.accepts_uploads:
        try:
            path = host.temp_dir()
            upload_dir = str(path)
            writable = os.access(path, os.W_OK)
        except OSError as e:
            logger.warning("Health check: upload directory unavailable: %s", str(e))
        if not writable:
            overall = "degraded"

    return HealthResponse(
        status=overall,
        version=__version__,
        modules=modules,
        upload_dir=upload_dir,
        upload_dir_writable=writable,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
