"""SQLAlchemy models."""

from rehearsal.models.reservation import Reservation, ReservationStatus, ReservationType
from rehearsal.models.room import Room

__all__ = [
    "Room",
    "Reservation",
    "ReservationStatus",
    "ReservationType",
]
