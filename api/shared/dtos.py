"""Shared DTOs for the article chat API."""
from datetime import datetime, timezone
from typing import Dict

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BaseDTO(BaseModel):
    """Base DTO with common configuration.

    Fields are serialized with camelCase aliases where declared, matching the
    browser-facing JSON contract, and accept either spelling on input.
    """

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


class HealthCheckResponse(BaseDTO):
    """Health check response DTO."""
    status: str = Field(description="Service status")
    timestamp: datetime = Field(default_factory=_utcnow)
    version: str = Field(default="0.1.0")
    dependencies: Dict[str, str] = Field(default_factory=dict)


class SuccessResponse(BaseDTO):
    """Acknowledgement for mutations that return no entity."""
    success: bool = Field(default=True)
