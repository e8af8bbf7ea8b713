"""
HTTP client utilities for external API calls.
"""

import time
from typing import Any, Dict, Optional, Tuple

import httpx

from jobflow.config.logging import get_logger

logger = get_logger(__name__)


class HTTPClient:
    """HTTP client for external API calls."""

    def __init__(
        self,
        base_url: str = "",
        timeout: float = 30.0,
        auth: Optional[Tuple[str, str]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self.auth = auth
        self.headers = headers or {}
        self.client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        """Async context manager entry."""
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            auth=self.auth,
            headers=self.headers,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        if self.client:
            await self.client.aclose()

    async def request(
        self,
        method: str,
        url: str,
        data: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """Make a request, logging its outcome and latency."""
        start_time = time.time()

        try:
            response = await self.client.request(method, url, json=data, headers=headers)
        except httpx.HTTPError as e:
            logger.error(
                "HTTP request failed",
                method=method,
                url=url,
                error=str(e),
                response_time_ms=(time.time() - start_time) * 1000,
            )
            raise

        logger.debug(
            "HTTP request completed",
            method=method,
            url=url,
            status_code=response.status_code,
            response_time_ms=(time.time() - start_time) * 1000,
        )
        return response

    async def get(self, url: str, headers: Optional[Dict[str, str]] = None) -> httpx.Response:
        """Make GET request."""
        return await self.request("GET", url, headers=headers)

    async def post(
        self,
        url: str,
        data: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """Make POST request."""
        return await self.request("POST", url, data=data, headers=headers)


async def get_redis_health(redis_url: str, timeout: float = 5.0) -> Dict[str, Any]:
    """Get Redis health status."""
    import redis.asyncio as aioredis

    client = aioredis.from_url(redis_url, socket_connect_timeout=timeout)
    try:
        start_time = time.time()
        await client.ping()
        info = await client.info("memory")
        return {
            "status": "healthy",
            "response_time_ms": round((time.time() - start_time) * 1000, 2),
            "memory_usage": info.get("used_memory", 0),
        }
    except Exception as e:
        logger.error("Redis health check failed", error=str(e))
        return {"status": "unhealthy", "error": str(e)}
    finally:
        await client.aclose()
