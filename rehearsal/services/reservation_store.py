"""SQLAlchemy persistence for reservations."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncGenerator, Sequence

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from rehearsal.config import get_settings
from rehearsal.models.reservation import Reservation, ReservationStatus
from rehearsal.models.room import Room
from rehearsal.planner import ReservationDraft

settings = get_settings()
logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "band_name",
    "contact_info",
    "purpose",
    "start_time",
    "end_time",
    "type",
    "participant_count",
)


def overlap_filter(room_id: int, start_time: datetime, end_time: datetime):
    """Confirmed reservations on a room whose [start, end) meets the window."""
    return and_(
        Reservation.room_id == room_id,
        Reservation.status == ReservationStatus.CONFIRMED,
        Reservation.start_time < end_time,
        Reservation.end_time > start_time,
    )


class ReservationStore:
    """
    Reads and writes used by the reservation planner.

    When the backend supports transactions, planner reads are locking reads
    (SELECT ... FOR UPDATE) so they see the latest committed rows and hold the
    room row until commit. Otherwise each insert is committed on its own.
    """

    def __init__(self, db: AsyncSession, supports_transactions: bool | None = None):
        self.db = db
        if supports_transactions is None:
            supports_transactions = settings.DB_TRANSACTIONS_ENABLED
        self.supports_transactions = supports_transactions

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[None, None]:
        """Commit on success, roll back on any error."""
        try:
            yield
            await self.db.commit()
        except BaseException:
            await self.db.rollback()
            raise

    async def find_room(self, room_id: int) -> Room | None:
        query = select(Room).where(Room.room_id == room_id)
        if self.supports_transactions:
            query = query.with_for_update()
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def find_overlapping(
        self,
        room_id: int,
        start_time: datetime,
        end_time: datetime,
        exclude_reservation_id: int | None = None,
    ) -> list[Reservation]:
        query = select(Reservation).where(overlap_filter(room_id, start_time, end_time))
        if exclude_reservation_id is not None:
            query = query.where(Reservation.reservation_id != exclude_reservation_id)
        query = query.order_by(Reservation.start_time)
        if self.supports_transactions:
            query = query.with_for_update()

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_reservation(
        self,
        reservation_id: int,
        for_update: bool = False,
    ) -> Reservation | None:
        """
        Get reservation by ID.

        With for_update the row is re-read from the database even if it is
        already loaded in this session.
        """
        query = select(Reservation).where(Reservation.reservation_id == reservation_id)
        if for_update:
            query = query.execution_options(populate_existing=True)
            if self.supports_transactions:
                query = query.with_for_update()
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def list_reservations(
        self,
        room_id: int | None = None,
        user_id: str | None = None,
        status: ReservationStatus | None = None,
        start_from: datetime | None = None,
        start_until: datetime | None = None,
    ) -> list[Reservation]:
        query = select(Reservation)

        if room_id is not None:
            query = query.where(Reservation.room_id == room_id)
        if user_id:
            query = query.where(Reservation.user_id == user_id)
        if status:
            query = query.where(Reservation.status == status)
        if start_from:
            query = query.where(Reservation.start_time >= start_from)
        if start_until:
            query = query.where(Reservation.start_time < start_until)

        query = query.order_by(Reservation.start_time)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def insert(self, drafts: Sequence[ReservationDraft]) -> list[Reservation]:
        """Write planned reservations and load their generated columns."""
        reservations = [Reservation(**draft.model_dump()) for draft in drafts]

        for reservation in reservations:
            self.db.add(reservation)
            if not self.supports_transactions:
                await self.db.commit()

        await self.db.flush()
        for reservation in reservations:
            await self.db.refresh(reservation)

        return reservations

    async def apply_edit(
        self,
        reservation: Reservation,
        draft: ReservationDraft,
    ) -> Reservation:
        for field in EDITABLE_FIELDS:
            setattr(reservation, field, getattr(draft, field))

        await self.db.flush()
        await self.db.refresh(reservation)
        return reservation

    async def cancel(self, reservation: Reservation) -> Reservation:
        reservation.status = ReservationStatus.CANCELLED

        await self.db.flush()
        await self.db.refresh(reservation)
        return reservation
