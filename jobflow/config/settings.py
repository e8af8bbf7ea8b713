"""
Application settings using Pydantic BaseSettings.
"""

from typing import Any, List, Optional, Union

from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # Application
    APP_NAME: str = "Job Workflow Service"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "production"
    LOG_LEVEL: str = "INFO"

    # API Configuration
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    API_PREFIX: str = "/api/v1"
    CORS_ORIGINS: Union[str, List[str]] = "*"

    # Database
    POSTGRES_USER: Optional[str] = None
    POSTGRES_PASSWORD: Optional[str] = None
    POSTGRES_SERVER: Optional[str] = None
    POSTGRES_DB: Optional[str] = None
    DATABASE_URL: Optional[str] = Field(None, validate_default=True)
    DATABASE_POOL_SIZE: int = 10
    DATABASE_MAX_OVERFLOW: int = 20
    DATABASE_ECHO: bool = False
    DATABASE_POOL_TIMEOUT: int = 30
    DATABASE_POOL_RECYCLE: int = 3600

    # Redis / Queue
    REDIS_URL: str = "redis://localhost:6379/0"
    CELERY_BROKER_URL: str = "redis://localhost:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/0"
    CELERY_TASK_TIME_LIMIT: int = 600  # 10 minutes
    CELERY_TASK_SOFT_TIME_LIMIT: int = 480  # 8 minutes

    # Payment gateway
    PAYMENT_GATEWAY: str = "mock"
    PAYMENT_CURRENCY: str = "INR"
    PAYMENT_DUE_MINUTES: int = 60
    RAZORPAY_BASE_URL: str = "https://api.razorpay.com/v1"
    RAZORPAY_KEY_ID: Optional[str] = None
    RAZORPAY_KEY_SECRET: Optional[str] = None
    RAZORPAY_WEBHOOK_SECRET: Optional[str] = None
    PAYMENT_GATEWAY_TIMEOUT: int = 30

    # Job workflow rules
    IMMEDIATE_RELEASE_PERCENT: int = 80
    MAX_NEGOTIATION_ROUNDS: int = 2
    DEFAULT_WARRANTY_DAYS: int = 30
    BID_EXPIRY_HOURS: int = 24

    # Notifications
    NOTIFICATION_WEBHOOK_URL: Optional[str] = None
    NOTIFICATION_TIMEOUT: int = 10

    # Monitoring
    ENABLE_METRICS: bool = True
    HEALTH_CHECK_TIMEOUT: int = 5

    # Background Workers
    BACKGROUND_WORKER_OUTBOX_INTERVAL_SECONDS: int = 30
    OUTBOX_BATCH_SIZE: int = 50
    OUTBOX_MAX_RETRIES: int = 5
    OUTBOX_RETENTION_DAYS: int = 7
    ENABLE_BACKGROUND_WORKERS: bool = True

    # Celery Beat Scheduler Configuration
    CELERY_WARRANTY_RELEASE_INTERVAL_SECONDS: int = 3600  # 1 hour
    CELERY_PAYMENT_EXPIRY_INTERVAL_SECONDS: int = 300  # 5 minutes
    CELERY_BID_EXPIRY_INTERVAL_SECONDS: int = 900  # 15 minutes
    CELERY_CLEANUP_OUTBOX_EVENTS_INTERVAL_HOURS: int = 6
    WARRANTY_RELEASE_BATCH_SIZE: int = 100
    PAYMENT_EXPIRY_BATCH_SIZE: int = 100
    BID_EXPIRY_BATCH_SIZE: int = 200

    # Development
    ENABLE_SWAGGER: bool = True

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        if isinstance(v, str):
            if v == "*":
                return ["*"]
            return [i.strip() for i in v.split(",")]
        elif isinstance(v, list):
            return v
        return ["*"]

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def assemble_db_connection(cls, v: Optional[str], info: ValidationInfo) -> Any:
        if isinstance(v, str):
            return v
        # Build from individual components if DATABASE_URL is not provided
        values = info.data
        user = values.get("POSTGRES_USER") or "jobflow"
        password = values.get("POSTGRES_PASSWORD") or "jobflow"
        host = values.get("POSTGRES_SERVER") or "localhost"
        db = values.get("POSTGRES_DB") or "jobflow"
        return f"postgresql+asyncpg://{user}:{password}@{host}:5432/{db}"

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        if v not in ["development", "staging", "production", "test"]:
            raise ValueError(
                "Environment must be one of: development, staging, production, test"
            )
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("PAYMENT_GATEWAY")
    @classmethod
    def validate_payment_gateway(cls, v: str) -> str:
        if v.lower() not in ["mock", "razorpay"]:
            raise ValueError("Payment gateway must be one of: mock, razorpay")
        return v.lower()

    @field_validator("DEFAULT_WARRANTY_DAYS", "BID_EXPIRY_HOURS")
    @classmethod
    def validate_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Must not be negative")
        return v

    @field_validator("IMMEDIATE_RELEASE_PERCENT")
    @classmethod
    def validate_release_percent(cls, v: int) -> int:
        if not 0 <= v <= 100:
            raise ValueError("Immediate release percent must be between 0 and 100")
        return v

    model_config = {"env_file": ".env", "case_sensitive": True, "extra": "ignore"}


# Global settings instance
settings = Settings()
