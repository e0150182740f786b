"""Room schemas."""

from datetime import datetime

from rehearsal.schemas.common import BaseSchema
from rehearsal.services.room_service import RoomState


class RoomResponse(BaseSchema):
    """Schema for room response."""

    room_id: int
    name: str
    capacity: int
    is_available: bool
    equipment: list[str] = []
    image_url: str | None = None


class CurrentReservation(BaseSchema):
    """Reservation in progress, as shown on the status board."""

    reservation_id: int
    band_name: str
    end_time: datetime


class RoomStatusResponse(RoomResponse):
    """Schema for one entry of the room status board."""

    status: RoomState
    current_reservation: CurrentReservation | None = None
