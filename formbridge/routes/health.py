"""
FormBridge - Health Check Route
================================

What:  GET /health for container probes and uptime monitors.
How:   Asks the content store for the repository metadata (no writes, no
       file reads) and reports the active variant.

Status levels:
    healthy:   GitHub reachable with the configured token
    degraded:  GitHub unreachable or the token cannot see the repository.
               Still HTTP 200: the process is up, submissions would fail.
"""

import logging
import time

from fastapi import APIRouter, Request

from formbridge import __version__
from formbridge.schemas.submission import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(request: Request) -> HealthResponse:
    service = request.app.state.submission_service

    content_store = "reachable"
    overall = "healthy"
    try:
        if not await service.store.check():
            content_store = "unreachable"
            overall = "degraded"
    except Exception as e:
        content_store = "unreachable"
        overall = "degraded"
        logger.warning("Health check: content store probe failed: %s", str(e))

    return HealthResponse(
        status=overall,
        version=__version__,
        variant=service.variant.name,
        content_store=content_store,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
