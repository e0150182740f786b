"""Builders and an in-memory reservation store for tests."""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from typing import Sequence

from rehearsal.models.reservation import Reservation, ReservationStatus, ReservationType
from rehearsal.models.room import Room
from rehearsal.planner import ReservationDraft, overlaps

# Monday
NOW = datetime(2026, 3, 2, 9, 0)


def at(hour: int, minute: int = 0, days: int = 1) -> datetime:
    """A time `days` after NOW's date at hour:minute."""
    base = NOW.replace(hour=0, minute=0) + timedelta(days=days)
    return base.replace(hour=hour, minute=minute)


def make_room(room_id: int = 1, capacity: int = 4, is_available: bool = True) -> Room:
    return Room(
        room_id=room_id,
        name=f"Room {room_id}",
        capacity=capacity,
        is_available=is_available,
        equipment=["drums", "PA"],
        image_url=None,
    )


def make_reservation(
    reservation_id: int,
    start_time: datetime,
    end_time: datetime,
    type: ReservationType = ReservationType.EXCLUSIVE,
    participant_count: int = 1,
    room_id: int = 1,
    user_id: str = "user-1",
    status: ReservationStatus = ReservationStatus.CONFIRMED,
) -> Reservation:
    return Reservation(
        reservation_id=reservation_id,
        room_id=room_id,
        user_id=user_id,
        band_id=None,
        band_name="The Testers",
        contact_info=None,
        purpose=None,
        start_time=start_time,
        end_time=end_time,
        status=status,
        type=type,
        participant_count=participant_count,
    )


class InMemoryStore:
    """Reservation store double keeping rows in lists."""

    def __init__(
        self,
        rooms: Sequence[Room] = (),
        reservations: Sequence[Reservation] = (),
        supports_transactions: bool = True,
    ):
        self.rooms = {room.room_id: room for room in rooms}
        self.reservations = list(reservations)
        self.supports_transactions = supports_transactions
        self.commits = 0
        self.rollbacks = 0
        self.insert_error: Exception | None = None
        self.room_lookups = 0
        self._pending: list[Reservation] = []
        self._next_id = max((r.reservation_id for r in self.reservations), default=0) + 1

    @asynccontextmanager
    async def transaction(self):
        self._pending = []
        try:
            yield
        except BaseException:
            self.rollbacks += 1
            self._pending = []
            raise
        self.reservations.extend(self._pending)
        self._pending = []
        self.commits += 1

    async def find_room(self, room_id: int) -> Room | None:
        self.room_lookups += 1
        return self.rooms.get(room_id)

    async def find_overlapping(
        self,
        room_id: int,
        start_time: datetime,
        end_time: datetime,
        exclude_reservation_id: int | None = None,
    ) -> list[Reservation]:
        return [
            r
            for r in self.reservations
            if r.room_id == room_id
            and r.status == ReservationStatus.CONFIRMED
            and r.reservation_id != exclude_reservation_id
            and overlaps(start_time, end_time, r.start_time, r.end_time)
        ]

    async def get_reservation(
        self, reservation_id: int, for_update: bool = False
    ) -> Reservation | None:
        for reservation in self.reservations:
            if reservation.reservation_id == reservation_id:
                return reservation
        return None

    async def list_reservations(self, room_id=None, user_id=None, status=None, **_):
        return [
            r
            for r in self.reservations
            if (room_id is None or r.room_id == room_id)
            and (user_id is None or r.user_id == user_id)
            and (status is None or r.status == status)
        ]

    async def insert(self, drafts: Sequence[ReservationDraft]) -> list[Reservation]:
        if self.insert_error is not None:
            raise self.insert_error
        created = []
        for draft in drafts:
            reservation = Reservation(**draft.model_dump())
            reservation.reservation_id = self._next_id
            self._next_id += 1
            created.append(reservation)
        self._pending.extend(created)
        return created

    async def apply_edit(self, reservation: Reservation, draft: ReservationDraft) -> Reservation:
        for field in (
            "band_name",
            "contact_info",
            "purpose",
            "start_time",
            "end_time",
            "type",
            "participant_count",
        ):
            setattr(reservation, field, getattr(draft, field))
        return reservation

    async def cancel(self, reservation: Reservation) -> Reservation:
        reservation.status = ReservationStatus.CANCELLED
        return reservation
