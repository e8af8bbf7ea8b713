"""
Common API schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ErrorResponse(BaseModel):
    """Error response schema."""

    error: str
    message: str
    type: str


class EntityResponse(BaseModel):
    """Base for responses built from domain entities or views."""

    model_config = ConfigDict(from_attributes=True)


class TimestampMixin(EntityResponse):
    """Mixin for timestamp fields."""

    created_at: datetime
    updated_at: Optional[datetime] = None
