"""
Health check endpoints for monitoring application status.
"""

from datetime import datetime, timezone
from typing import Dict, Any

from fastapi import APIRouter, Request, Response, status

router = APIRouter()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check() -> Dict[str, Any]:
    """
    Basic health check endpoint.

    Returns 200 if application is running.
    """
    return {
        "status": "healthy",
        "timestamp": _now(),
        "service": "store-sync",
    }


@router.get("/ready", status_code=status.HTTP_200_OK)
def readiness_check(request: Request, response: Response) -> Dict[str, Any]:
    """
    Readiness check endpoint.

    Verifies the database answers before traffic is routed here.
    """
    database_ok = request.app.state.gateway.ping()

    if not database_ok:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    return {
        "status": "healthy" if database_ok else "unhealthy",
        "timestamp": _now(),
        "checks": {"database": {"status": "healthy" if database_ok else "unhealthy"}},
    }


@router.get("/live", status_code=status.HTTP_200_OK)
async def liveness_check() -> Dict[str, str]:
    """
    Liveness check endpoint.

    Returns 200 while the process is running, even if dependencies are down.
    """
    return {"status": "alive", "timestamp": _now()}
