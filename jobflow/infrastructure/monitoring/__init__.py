"""
Monitoring package.
"""

from .health_checks import HealthChecker, HealthStatus, health_checker
from .metrics import get_metrics, get_metrics_content_type

__all__ = [
    "HealthChecker",
    "HealthStatus",
    "health_checker",
    "get_metrics",
    "get_metrics_content_type",
]
