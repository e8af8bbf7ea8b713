"""
Health check endpoints for the application.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response

from jobflow.config.logging import get_logger
from jobflow.infrastructure.monitoring.health_checks import HealthChecker, health_checker
from jobflow.infrastructure.monitoring.metrics import get_metrics, get_metrics_content_type

logger = get_logger(__name__)
router = APIRouter(prefix="/health", tags=["health"])


def get_health_checker() -> HealthChecker:
    """Get health checker instance."""
    return health_checker


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("")
async def health_check(
    checker: HealthChecker = Depends(get_health_checker),
) -> Dict[str, Any]:
    """Basic health check endpoint."""
    health = await checker.check_readiness()
    return {"status": health.status, "timestamp": health.timestamp}


@router.get("/ready")
async def readiness_check(
    checker: HealthChecker = Depends(get_health_checker),
) -> Dict[str, Any]:
    """Readiness check for Kubernetes."""
    health = await checker.check_readiness()
    if not health.is_healthy:
        logger.warning("Service not ready", checks=health.checks)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service not ready",
        )
    return {"status": "ready", "timestamp": health.timestamp}


@router.get("/live")
async def liveness_check() -> Dict[str, Any]:
    """Liveness check for Kubernetes."""
    return {"status": "alive", "timestamp": _now()}


@router.get("/detailed")
async def detailed_health_check(
    checker: HealthChecker = Depends(get_health_checker),
) -> Dict[str, Any]:
    """Detailed health check with all components."""
    health = await checker.check_all_components()
    return {
        "status": health.status,
        "components": health.checks,
        "timestamp": health.timestamp,
    }


@router.get("/metrics")
async def prometheus_metrics() -> Response:
    """Prometheus metrics endpoint."""
    logger.debug("Prometheus metrics requested")
    return Response(content=get_metrics(), media_type=get_metrics_content_type())
