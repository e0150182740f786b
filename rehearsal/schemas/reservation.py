"""Reservation schemas."""

from datetime import datetime

from pydantic import Field, field_validator

from rehearsal.models.reservation import ReservationStatus, ReservationType
from rehearsal.schemas.common import BaseSchema, to_naive_utc


class ReservationCreate(BaseSchema):
    """Schema for creating a reservation or a weekly series."""

    room_id: int
    start_time: datetime
    end_time: datetime
    type: ReservationType = ReservationType.EXCLUSIVE
    participant_count: int = Field(default=1, ge=1)
    recurring_weeks: int = Field(default=1, ge=1)
    band_name: str = Field(..., min_length=1, max_length=255)
    band_id: str | None = Field(None, max_length=50)
    contact_info: str | None = Field(None, max_length=255)
    purpose: str | None = Field(None, max_length=500)

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_time(cls, value: datetime) -> datetime:
        return to_naive_utc(value)


class ReservationUpdate(BaseSchema):
    """Schema for editing a reservation. Times change only when both are given."""

    start_time: datetime | None = None
    end_time: datetime | None = None
    type: ReservationType | None = None
    participant_count: int | None = Field(None, ge=1)
    band_name: str | None = Field(None, min_length=1, max_length=255)
    contact_info: str | None = Field(None, max_length=255)
    purpose: str | None = Field(None, max_length=500)

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_time(cls, value: datetime | None) -> datetime | None:
        return to_naive_utc(value)


class ReservationResponse(BaseSchema):
    """Schema for reservation response."""

    reservation_id: int
    room_id: int
    user_id: str
    band_id: str | None = None
    band_name: str
    contact_info: str | None = None
    purpose: str | None = None
    start_time: datetime
    end_time: datetime
    status: ReservationStatus
    type: ReservationType
    participant_count: int
    created_at: datetime | None = None
