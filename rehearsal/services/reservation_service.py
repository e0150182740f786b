"""Reservation service with per-room locking."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncGenerator
from zoneinfo import ZoneInfo

import redis.asyncio as redis
from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rehearsal.config import get_settings
from rehearsal.distributed_lock import DistributedLockError, room_lock
from rehearsal.errors import (
    InvalidReservationState,
    NotOwner,
    PlanningError,
    ReservationNotFound,
    StorageFailure,
)
from rehearsal.models.reservation import Reservation, ReservationStatus
from rehearsal.planner import (
    ActorRole,
    BookingPolicy,
    BookingRequest,
    ReservationChanges,
    ReservationPlanner,
    utc_now,
)
from rehearsal.services.reservation_store import ReservationStore

settings = get_settings()
logger = logging.getLogger(__name__)


class ReservationService:
    """
    Runs every booking mutation through the planner under a room lock.

    Create, recurring create and edit all read the room's live reservations,
    validate, and write inside one transaction guarded by a Redis lock on the
    room. A rejected plan writes nothing.
    """

    def __init__(
        self,
        db: AsyncSession,
        redis_client: redis.Redis,
        store: ReservationStore | None = None,
        policy: BookingPolicy | None = None,
    ):
        self.db = db
        self.redis = redis_client
        self.store = store or ReservationStore(db)
        self.planner = ReservationPlanner(
            self.store.find_room,
            self.store.find_overlapping,
            policy or BookingPolicy.from_settings(settings),
            tz=ZoneInfo(settings.LOCAL_TIMEZONE),
        )

    @asynccontextmanager
    async def _room_scope(self, room_id: int) -> AsyncGenerator[None, None]:
        """
        Lock the room and open a transaction.

        Storage and lock failures surface as StorageFailure; rejections pass
        through unchanged. Either way the transaction is rolled back.
        """
        if not self.store.supports_transactions:
            logger.warning(
                "Storage backend does not support transactions; "
                "room %s is protected by the Redis room lock only",
                room_id,
            )

        try:
            async with room_lock(self.redis, room_id):
                async with self.store.transaction():
                    yield
        except PlanningError as e:
            logger.info("Rejected change on room %s: %s (%s)", room_id, e.kind, e.message)
            raise
        except DistributedLockError as e:
            logger.error("Could not lock room %s: %s", room_id, e)
            raise StorageFailure("Room is busy. Please try again.") from e
        except (SQLAlchemyError, RedisError) as e:
            logger.error("Storage failure on room %s: %s", room_id, e, exc_info=True)
            raise StorageFailure("Reservation storage is unavailable") from e

    async def _load(self, reservation_id: int) -> Reservation:
        try:
            reservation = await self.store.get_reservation(reservation_id)
        except SQLAlchemyError as e:
            logger.error("Failed to load reservation %s: %s", reservation_id, e, exc_info=True)
            raise StorageFailure("Reservation storage is unavailable") from e

        if reservation is None:
            raise ReservationNotFound(reservation_id)
        return reservation

    @staticmethod
    def _check_owner(
        reservation: Reservation,
        actor_id: str,
        actor_role: ActorRole,
    ) -> None:
        if actor_role != ActorRole.ADMIN and reservation.user_id != actor_id:
            raise NotOwner(reservation.reservation_id)

    async def create_reservations(
        self,
        request: BookingRequest,
        now: datetime | None = None,
    ) -> list[Reservation]:
        """
        Book one slot, or a weekly series for admins.

        Returns:
            The stored reservations in slot order

        Raises:
            PlanningError: If any slot is rejected; nothing is stored
        """
        now = now or utc_now()

        async with self._room_scope(request.room_id):
            drafts = await self.planner.plan(request, now)
            reservations = await self.store.insert(drafts)

        logger.info(
            "Created %d reservation(s) on room %s for user %s",
            len(reservations),
            request.room_id,
            request.actor_id,
        )
        return reservations

    async def update_reservation(
        self,
        reservation_id: int,
        changes: ReservationChanges,
        actor_id: str,
        actor_role: ActorRole,
        now: datetime | None = None,
    ) -> Reservation:
        """
        Edit a reservation, re-validating against the live reservation set.

        Raises:
            ReservationNotFound: Unknown reservation
            NotOwner: Non-admin editing someone else's reservation
            PlanningError: If the edited slot is rejected
        """
        now = now or utc_now()
        reservation = await self._load(reservation_id)
        self._check_owner(reservation, actor_id, actor_role)

        async with self._room_scope(reservation.room_id):
            live = await self.store.get_reservation(reservation_id, for_update=True)
            if live is None:
                raise ReservationNotFound(reservation_id)
            draft = await self.planner.plan_edit(live, changes, actor_role, now)
            reservation = await self.store.apply_edit(live, draft)

        logger.info("Updated reservation %s by %s", reservation_id, actor_id)
        return reservation

    async def cancel_reservation(
        self,
        reservation_id: int,
        actor_id: str,
        actor_role: ActorRole,
    ) -> Reservation:
        """
        Cancel a reservation. The row is kept with status cancelled.

        Raises:
            ReservationNotFound: Unknown reservation
            NotOwner: Non-admin cancelling someone else's reservation
            InvalidReservationState: Already cancelled
        """
        reservation = await self._load(reservation_id)
        self._check_owner(reservation, actor_id, actor_role)

        async with self._room_scope(reservation.room_id):
            live = await self.store.get_reservation(reservation_id, for_update=True)
            if live is None:
                raise ReservationNotFound(reservation_id)
            if live.status != ReservationStatus.CONFIRMED:
                raise InvalidReservationState(
                    reservation_id, ReservationStatus(live.status).value
                )
            reservation = await self.store.cancel(live)

        logger.info("Cancelled reservation %s by %s", reservation_id, actor_id)
        return reservation

    async def get_reservation(self, reservation_id: int) -> Reservation:
        """Get reservation by ID."""
        return await self._load(reservation_id)

    async def list_reservations(
        self,
        room_id: int | None = None,
        user_id: str | None = None,
        status: ReservationStatus | None = None,
        start_from: datetime | None = None,
        start_until: datetime | None = None,
    ) -> list[Reservation]:
        """List reservations ordered by start time."""
        try:
            return await self.store.list_reservations(
                room_id=room_id,
                user_id=user_id,
                status=status,
                start_from=start_from,
                start_until=start_until,
            )
        except SQLAlchemyError as e:
            logger.error("Failed to list reservations: %s", e, exc_info=True)
            raise StorageFailure("Reservation storage is unavailable") from e
