"""Common schema utilities."""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Base schema with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )


class ErrorResponse(BaseModel):
    """Error response schema."""

    error: str
    detail: str | None = None
    timestamp: datetime


class SuccessResponse(BaseModel):
    """Simple success response."""

    success: bool = True
    message: str


def to_naive_utc(value: datetime | None) -> datetime | None:
    """Stored times are naive UTC; convert aware inputs, keep naive ones."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
