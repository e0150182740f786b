"""Pydantic schemas for API request/response."""

from rehearsal.schemas.common import ErrorResponse, SuccessResponse
from rehearsal.schemas.reservation import (
    ReservationCreate,
    ReservationResponse,
    ReservationUpdate,
)
from rehearsal.schemas.room import RoomResponse, RoomStatusResponse

__all__ = [
    "ErrorResponse",
    "SuccessResponse",
    "RoomResponse",
    "RoomStatusResponse",
    "ReservationCreate",
    "ReservationUpdate",
    "ReservationResponse",
]
