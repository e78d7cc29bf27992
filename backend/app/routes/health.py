"""
Backoffice API: Health Check Route
===================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Pings the database through the process-scoped gateway and reports
       aggregate status, version and uptime.
Who:   Called by container health checks, load balancers and monitoring.

Status levels:
    - healthy:   database reachable (HTTP 200)
    - unhealthy: database unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Depends, Response

from app import __version__
from app.database import Database, get_database
from app.schemas.resource import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

# Process start, for uptime reporting
_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    responses={503: {"description": "Database unreachable", "model": HealthResponse}},
)
async def health_check(
    response: Response,
    db: Database = Depends(get_database),
) -> HealthResponse:
    """
    Check that the service can reach its database.

    Check details:
        Database: executes SELECT 1 on a pooled connection
    """
    connected = await db.ping()
    if not connected:
        response.status_code = 503

    return HealthResponse(
        status="healthy" if connected else "unhealthy",
        version=__version__,
        database="connected" if connected else "disconnected",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
