"""Health check endpoints for load balancers and monitoring."""

import os
from datetime import datetime

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlalchemy import text

from snipvault.database import engine

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Lightweight health check for load balancer (no DB check).

    Returns 200 OK if the service is running.
    """
    return {
        "status": "ok",
        "service": "SnipVault",
        "timestamp": datetime.utcnow().isoformat(),
        "environment": os.getenv("ENVIRONMENT", "development"),
    }


@router.get("/health/ready")
async def readiness_check():
    """Readiness check: 200 only when the store answers."""
    checks = {
        "service": "ok",
        "database": "unknown",
    }
    overall_healthy = True

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        checks["database"] = f"error: {str(e)[:100]}"
        overall_healthy = False

    return JSONResponse(
        status_code=status.HTTP_200_OK if overall_healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "healthy" if overall_healthy else "unhealthy",
            "service": "SnipVault",
            "checks": checks,
            "timestamp": datetime.utcnow().isoformat(),
        },
    )
