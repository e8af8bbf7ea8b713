"""
External integrations package.
"""

from .http_client import HTTPClient, get_redis_health

__all__ = [
    "HTTPClient",
    "get_redis_health",
]
