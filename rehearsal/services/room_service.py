"""Room service."""

import enum
import logging
from datetime import datetime

from sqlalchemy import and_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rehearsal.errors import StorageFailure
from rehearsal.models.reservation import Reservation, ReservationStatus
from rehearsal.models.room import Room

logger = logging.getLogger(__name__)


class RoomState(str, enum.Enum):
    """Live state shown on the room status board."""

    AVAILABLE = "available"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"


class RoomService:
    """Read-only room queries. Database errors surface as StorageFailure."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _execute(self, query):
        try:
            return await self.db.execute(query)
        except SQLAlchemyError as e:
            logger.error("Failed to read rooms: %s", e, exc_info=True)
            raise StorageFailure("Room storage is unavailable") from e

    async def get_room(self, room_id: int) -> Room | None:
        """Get room by ID."""
        result = await self._execute(select(Room).where(Room.room_id == room_id))
        return result.scalar_one_or_none()

    async def get_rooms(self, available_only: bool = False) -> list[Room]:
        """Get rooms sorted by name."""
        query = select(Room)
        if available_only:
            query = query.where(Room.is_available.is_(True))
        query = query.order_by(Room.name)

        result = await self._execute(query)
        return list(result.scalars().all())

    async def get_active_reservations(self, now: datetime) -> list[Reservation]:
        """Confirmed reservations in progress at the given instant."""
        result = await self._execute(
            select(Reservation).where(
                and_(
                    Reservation.status == ReservationStatus.CONFIRMED,
                    Reservation.start_time <= now,
                    Reservation.end_time > now,
                )
            )
        )
        return list(result.scalars().all())

    async def get_status_board(self, now: datetime) -> list[dict]:
        """
        Current state of every room.

        A room with a reservation in progress is occupied, otherwise it is
        available or in maintenance. When several shared reservations are in
        progress, the one ending last is reported.
        """
        current: dict[int, Reservation] = {}
        for reservation in await self.get_active_reservations(now):
            existing = current.get(reservation.room_id)
            if existing is None or reservation.end_time > existing.end_time:
                current[reservation.room_id] = reservation

        board = []
        for room in await self.get_rooms():
            active = current.get(room.room_id)
            if active is not None:
                state = RoomState.OCCUPIED
            elif room.is_available:
                state = RoomState.AVAILABLE
            else:
                state = RoomState.MAINTENANCE
            board.append(
                {
                    "room": room,
                    "status": state,
                    "current_reservation": active,
                }
            )
        return board
