"""Health check and monitoring endpoints.

Provides endpoints for:
- Basic health checks
- Kubernetes readiness/liveness checks
"""

import time
from typing import Dict, Any

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.exceptions import CabinetConnectionError
from app.core.logging import get_logger
from app.services.document_service import document_service

logger = get_logger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/")
async def root() -> Dict[str, Any]:
    """Root endpoint with API information."""
    return {
        "message": f"Welcome to {settings.PROJECT_NAME}",
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "status": "running",
        "docs": "/docs" if settings.DEBUG else None,
        "redoc": "/redoc" if settings.DEBUG else None,
        "health": "/health",
    }


@router.get("/health")
async def health_check() -> Dict[str, Any]:
    """
    Health check endpoint for load balancers.

    Does not contact the cabinet; use /ready for that.
    """
    return {
        "status": "healthy",
        "timestamp": time.time(),
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "cabinet_configured": not settings.cabinet_config.missing_values(),
    }


@router.get("/ready")
async def readiness_check() -> Dict[str, Any]:
    """Readiness check: opens and closes a cabinet session."""
    try:
        await document_service.check_connection()
    except CabinetConnectionError as e:
        logger.warning("Readiness check failed", error=str(e))
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "ready": False,
                "reason": "Document cabinet not reachable",
                "timestamp": time.time(),
            },
        )

    return {"ready": True, "timestamp": time.time()}


@router.get("/live")
async def liveness_check() -> Dict[str, Any]:
    """Liveness check endpoint for Kubernetes."""
    return {"alive": True, "timestamp": time.time()}
