"""Services package."""

from rehearsal.services.reservation_service import ReservationService
from rehearsal.services.reservation_store import ReservationStore
from rehearsal.services.room_service import RoomService

__all__ = [
    "RoomService",
    "ReservationStore",
    "ReservationService",
]
