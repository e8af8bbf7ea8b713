"""
Database connectivity checks.
"""

import time
from typing import Any, Dict

from sqlalchemy import text

from jobflow.config.database import get_session_factory
from jobflow.config.logging import get_logger

logger = get_logger(__name__)


async def get_database_health() -> Dict[str, Any]:
    """Check database health."""
    try:
        start_time = time.time()

        async with get_session_factory()() as session:
            result = await session.execute(text("SELECT 1"))
            result.fetchone()

        response_time = (time.time() - start_time) * 1000
        return {"status": "healthy", "response_time_ms": round(response_time, 2)}

    except Exception as e:
        logger.error("Database health check failed", error=str(e))
        return {"status": "unhealthy", "error": str(e)}
