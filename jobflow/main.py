"""
Main application entry point.
"""

from jobflow.api.app import create_app
from jobflow.config.logging import configure_logging, get_logger
from jobflow.config.settings import settings

configure_logging()
logger = get_logger(__name__)

app = create_app()


if __name__ == "__main__":
    import uvicorn

    logger.info("Starting Job Workflow Service", port=settings.API_PORT)

    uvicorn.run(
        "jobflow.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
