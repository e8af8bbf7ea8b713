"""
FastAPI application factory.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from jobflow.api.middleware.error_handler import ErrorHandlerMiddleware
from jobflow.api.middleware.logging import LoggingMiddleware
from jobflow.api.routes import bids, disputes, health, jobs, webhooks
from jobflow.config.database import close_database_connections
from jobflow.config.logging import get_logger
from jobflow.config.settings import settings

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the outbox worker with the app and release resources on the way out."""
    worker_manager = None
    logger.info("Application startup", environment=settings.ENVIRONMENT)

    if settings.ENABLE_BACKGROUND_WORKERS:
        from jobflow.background.workers import WorkerManager

        worker_manager = WorkerManager()
        await worker_manager.start_all_workers()
    app.state.worker_manager = worker_manager

    try:
        yield
    finally:
        logger.info("Application shutdown")
        if worker_manager:
            await worker_manager.stop_all_workers()
        await close_database_connections()


def create_app(enable_lifespan: Optional[bool] = None) -> FastAPI:
    """Create and configure FastAPI application."""
    if enable_lifespan is None:
        enable_lifespan = settings.ENVIRONMENT != "test"

    docs_enabled = settings.ENABLE_SWAGGER or settings.DEBUG
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Job bidding, assignment, staged payment and warranty release",
        openapi_url=f"{settings.API_PREFIX}/openapi.json" if docs_enabled else None,
        docs_url=f"{settings.API_PREFIX}/docs" if docs_enabled else None,
        redoc_url=f"{settings.API_PREFIX}/redoc" if docs_enabled else None,
        lifespan=lifespan if enable_lifespan else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    ErrorHandlerMiddleware(app)
    LoggingMiddleware(app)

    app.include_router(health.router, prefix=settings.API_PREFIX, tags=["health"])
    app.include_router(jobs.router, prefix=settings.API_PREFIX, tags=["jobs"])
    app.include_router(bids.router, prefix=settings.API_PREFIX, tags=["bids"])
    app.include_router(disputes.router, prefix=settings.API_PREFIX, tags=["disputes"])
    app.include_router(webhooks.router, prefix=settings.API_PREFIX, tags=["webhooks"])

    return app
