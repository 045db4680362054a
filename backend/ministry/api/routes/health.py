"""Health & Readiness Probes — liveness and readiness endpoints.

Invariants:
    - GET /health/ always returns 200 if the process is up (liveness)
    - GET /health/ready returns 503 if the database is unreachable (readiness)
    - Readiness reports which providers are configured, but never fails on them
"""

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from ministry.config import get_settings
from ministry.infrastructure import database

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": "ministry-api",
        "version": "1.0.0",
    }


@router.get("/ready")
async def readiness_check():
    """Readiness probe — includes database connectivity."""
    manager = database.db_manager
    latency_ms = await manager.ping() if manager else None
    if latency_ms is None:
        logger.warning("Readiness check failed: database unreachable")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "reason": "database_unavailable"},
        )
    settings = get_settings()
    return {
        "status": "ready",
        "checks": {"database": "healthy", "database_latency_ms": latency_ms},
        "providers": {
            "email": bool(settings.resend_api_key),
            "sms": bool(settings.twilio_account_sid and settings.twilio_auth_token),
        },
    }
