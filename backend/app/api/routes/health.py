"""Health Probes — liveness and readiness for the likes service.

Invariants:
    - GET /api/v1/health/ answers 200 whenever the process serves requests
    - GET /api/v1/health/ready answers 503 unless the database answers and the
      notification dispatcher is consuming its queue
    - Probes never touch the likes table
"""

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from app.infrastructure import database

router = APIRouter(prefix="/api/v1/health", tags=["health"])

SERVICE_NAME = "likes-api"
SERVICE_VERSION = "1.0.0"


@router.get("/", status_code=status.HTTP_200_OK)
async def liveness():
    return {"status": "healthy", "service": SERVICE_NAME, "version": SERVICE_VERSION}


@router.get("/ready")
async def readiness(request: Request):
    """Database reachability plus dispatcher state and backlog."""
    manager = database.db_manager
    checks = {
        "database": "healthy" if manager and await manager.health_check() else "unavailable",
    }

    dispatcher = getattr(request.app.state, "dispatcher", None)
    running = getattr(dispatcher, "running", None)
    if running is not None:
        checks["dispatcher"] = "running" if running else "stopped"
        checks["notificationBacklog"] = dispatcher.backlog

    ready = checks["database"] == "healthy" and checks.get("dispatcher") != "stopped"
    if not ready:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "checks": checks},
        )
    return {"status": "ready", "checks": checks}
