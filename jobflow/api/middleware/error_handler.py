"""
Error handling middleware.
"""

import traceback

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from jobflow.config.logging import get_logger
from jobflow.domain.exceptions.gateway_error import GatewayError
from jobflow.domain.exceptions.workflow_error import (
    AlreadyAssignedError,
    InternalError,
    JobWorkflowError,
)
from jobflow.infrastructure.monitoring.metrics import record_error

logger = get_logger(__name__)

STATUS_BY_CODE = {
    "validation_error": 400,
    "terms_not_accepted": 400,
    "forbidden": 403,
    "not_found": 404,
    "invalid_state": 409,
    "duplicate_bid": 409,
    "round_limit_reached": 409,
    "already_assigned": 409,
    "internal_error": 500,
}


def error_body(exc: JobWorkflowError) -> dict:
    return {
        "error": exc.__class__.__name__,
        "message": exc.message,
        "type": exc.code,
    }


class ErrorHandlerMiddleware:
    """Error handling middleware for FastAPI."""

    def __init__(self, app: FastAPI):
        self.app = app
        self.add_error_handlers()

    def add_error_handlers(self) -> None:
        """Add custom error handlers to FastAPI app."""
        add_error_handlers(self.app)


def add_error_handlers(app: FastAPI) -> None:
    """Add custom error handlers to FastAPI app."""

    @app.exception_handler(JobWorkflowError)
    async def workflow_error_handler(request: Request, exc: JobWorkflowError):
        status_code = STATUS_BY_CODE.get(exc.code, 400)

        if isinstance(exc, AlreadyAssignedError):
            # Losing an assignment race is expected
            logger.info("Assignment race lost", error=str(exc), path=request.url.path)
        elif status_code >= 500:
            logger.error("Workflow error", error=str(exc), path=request.url.path)
        else:
            logger.warning(
                "Workflow request refused",
                error=str(exc),
                type=exc.code,
                path=request.url.path,
            )

        record_error(exc.code, "api")
        return JSONResponse(status_code=status_code, content=error_body(exc))

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError):
        logger.error("Gateway error", error=str(exc), path=request.url.path)
        record_error("gateway_error", "api")
        return JSONResponse(
            status_code=502,
            content={
                "error": "Gateway Error",
                "message": str(exc),
                "type": "gateway_error",
            },
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error("Database error", error=str(exc), path=request.url.path)
        record_error("database_error", "api")
        return JSONResponse(
            status_code=500,
            content=error_body(InternalError("A database error occurred")),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": "HTTP Error",
                "message": exc.detail,
                "type": "http_error",
            },
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled exception",
            error=str(exc),
            path=request.url.path,
            traceback=traceback.format_exc(),
        )
        record_error("internal_error", "api")
        return JSONResponse(
            status_code=500,
            content=error_body(InternalError("An unexpected error occurred")),
        )
