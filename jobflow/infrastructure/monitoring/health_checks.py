"""
Health check implementations for the application.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Optional

from jobflow.config.logging import get_logger
from jobflow.config.settings import settings
from jobflow.infrastructure.database.connection import get_database_health
from jobflow.infrastructure.external.http_client import get_redis_health

logger = get_logger(__name__)

HealthCheck = Callable[[], Awaitable[Dict[str, Any]]]


@dataclass
class HealthStatus:
    """Aggregated result of a set of health checks."""

    is_healthy: bool
    checks: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    @property
    def status(self) -> str:
        return "healthy" if self.is_healthy else "unhealthy"


async def _check_redis() -> Dict[str, Any]:
    return await get_redis_health(settings.REDIS_URL, timeout=settings.HEALTH_CHECK_TIMEOUT)


async def _check_payment_gateway() -> Dict[str, Any]:
    from jobflow.infrastructure.payments import get_payment_gateway

    status = await get_payment_gateway().health_check()
    return {
        "status": "healthy" if status.is_healthy else "unhealthy",
        "gateway": settings.PAYMENT_GATEWAY,
        "message": status.status_message,
        "response_time_ms": status.response_time_ms,
    }


class HealthChecker:
    """Health checker for application components."""

    # Components that must be healthy for the service to take traffic
    CRITICAL = ("database",)

    def __init__(self, checks: Optional[Dict[str, HealthCheck]] = None):
        self.checks: Dict[str, HealthCheck] = checks or {
            "database": get_database_health,
            "redis": _check_redis,
            "payment_gateway": _check_payment_gateway,
        }

    async def run_health_checks(self) -> Dict[str, Dict[str, Any]]:
        """Run all health checks."""
        results = {}
        for check_name, check_func in self.checks.items():
            results[check_name] = await self.run_check(check_name, check_func)
        return results

    async def run_check(self, check_name: str, check_func: HealthCheck) -> Dict[str, Any]:
        try:
            return await check_func()
        except Exception as e:
            logger.error("Health check failed", check_name=check_name, error=str(e))
            return {"status": "error", "error": str(e)}

    async def check_readiness(self) -> HealthStatus:
        """Check if the service is ready to receive traffic."""
        results = {}
        for name in self.CRITICAL:
            if name in self.checks:
                results[name] = await self.run_check(name, self.checks[name])
        healthy = all(result.get("status") == "healthy" for result in results.values())
        return HealthStatus(is_healthy=healthy, checks=results)

    async def check_all_components(self) -> HealthStatus:
        """Check all system components."""
        results = await self.run_health_checks()
        healthy = all(result.get("status") == "healthy" for result in results.values())
        return HealthStatus(is_healthy=healthy, checks=results)


# Global health checker instance
health_checker = HealthChecker()
