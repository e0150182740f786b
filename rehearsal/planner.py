"""
Reservation planner.

Decides whether a booking request is admissible and, if it is, returns the
reservation drafts to persist. The planner owns no storage: it is handed a
room lookup and an overlap query, and the caller inserts the drafts inside
its own transaction.

All datetimes are naive UTC.
"""

import enum
import logging
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Awaitable, Callable, Iterable, Protocol, Sequence

from pydantic import BaseModel, ConfigDict, Field

from rehearsal.config import Settings
from rehearsal.errors import (
    CapacityExceeded,
    Conflict,
    DurationExceeded,
    HorizonExceeded,
    InvalidReservationState,
    InvalidTimeRange,
    PastBooking,
    RoomNotFound,
    RoomUnavailable,
)
from rehearsal.models.reservation import ReservationStatus, ReservationType

logger = logging.getLogger(__name__)

RECURRENCE_STEP = timedelta(days=7)


class ActorRole(str, enum.Enum):
    """Role of the user making the request."""

    ADMIN = "admin"
    USER = "user"


class RoomRecord(Protocol):
    room_id: int
    capacity: int
    is_available: bool


class BookedSlot(Protocol):
    start_time: datetime
    end_time: datetime
    type: ReservationType
    participant_count: int | None
    status: ReservationStatus


class EditableReservation(BookedSlot, Protocol):
    reservation_id: int
    room_id: int
    user_id: str
    band_id: str | None
    band_name: str
    contact_info: str | None
    purpose: str | None


FindRoom = Callable[[int], Awaitable[RoomRecord | None]]
FindOverlapping = Callable[
    [int, datetime, datetime, int | None], Awaitable[Sequence[BookedSlot]]
]


class Slot(BaseModel):
    """One concrete [start, end) window."""

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime


class BookingRequest(BaseModel):
    """A request to book a room, possibly repeated weekly."""

    model_config = ConfigDict(frozen=True)

    room_id: int
    start_time: datetime
    end_time: datetime
    type: ReservationType = ReservationType.EXCLUSIVE
    participant_count: int = Field(default=1, ge=1)
    recurring_weeks: int = Field(default=1, ge=1)
    band_name: str
    band_id: str | None = None
    contact_info: str | None = None
    purpose: str | None = None
    actor_role: ActorRole = ActorRole.USER
    actor_id: str


class ReservationChanges(BaseModel):
    """Fields an edit may change; None keeps the stored value."""

    model_config = ConfigDict(frozen=True)

    start_time: datetime | None = None
    end_time: datetime | None = None
    type: ReservationType | None = None
    participant_count: int | None = Field(default=None, ge=1)
    band_name: str | None = None
    contact_info: str | None = None
    purpose: str | None = None


class ReservationDraft(BaseModel):
    """A validated reservation ready to be written."""

    model_config = ConfigDict(frozen=True)

    room_id: int
    user_id: str
    band_id: str | None = None
    band_name: str
    contact_info: str | None = None
    purpose: str | None = None
    start_time: datetime
    end_time: datetime
    type: ReservationType = ReservationType.EXCLUSIVE
    participant_count: int = 1
    status: ReservationStatus = ReservationStatus.CONFIRMED


def utc_now() -> datetime:
    """Current time as naive UTC, matching stored reservation times."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def overlaps(
    a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime
) -> bool:
    """Half-open interval overlap; touching boundaries do not overlap."""
    return a_start < b_end and b_start < a_end


def _shift_wall_clock(value: datetime, weeks: int, tz: tzinfo) -> datetime:
    local = value.replace(tzinfo=timezone.utc).astimezone(tz).replace(tzinfo=None)
    shifted = (local + RECURRENCE_STEP * weeks).replace(tzinfo=tz)
    return shifted.astimezone(timezone.utc).replace(tzinfo=None)


def expand_slots(
    start_time: datetime,
    end_time: datetime,
    weeks: int,
    tz: tzinfo | None = None,
) -> list[Slot]:
    """
    Repeat a window weekly.

    Shifting by whole days keeps the time of day and handles month and year
    boundaries. With a time zone, each week keeps the local wall-clock time,
    so a series crossing a daylight saving change moves in UTC instead.
    """
    if tz is None:
        return [
            Slot(start=start_time + RECURRENCE_STEP * i, end=end_time + RECURRENCE_STEP * i)
            for i in range(weeks)
        ]
    return [
        Slot(
            start=_shift_wall_clock(start_time, i, tz),
            end=_shift_wall_clock(end_time, i, tz),
        )
        for i in range(weeks)
    ]


class BookingPolicy(BaseModel):
    """Advance-booking and duration limits for non-admin actors."""

    model_config = ConfigDict(frozen=True)

    horizon: timedelta = timedelta(days=7)
    max_duration: timedelta = timedelta(hours=5)

    @classmethod
    def from_settings(cls, settings: Settings) -> "BookingPolicy":
        return cls(
            horizon=timedelta(days=settings.BOOKING_HORIZON_DAYS),
            max_duration=timedelta(hours=settings.MAX_BOOKING_HOURS),
        )

    def check_window(
        self,
        start_time: datetime,
        end_time: datetime,
        actor_role: ActorRole,
        now: datetime,
    ) -> None:
        """
        Validate one requested window.

        Raises:
            InvalidTimeRange: end is not after start
            PastBooking: start precedes now
            HorizonExceeded: non-admin start is too far ahead
            DurationExceeded: non-admin window is too long
        """
        if end_time <= start_time:
            raise InvalidTimeRange(start_time, end_time)

        if start_time < now:
            raise PastBooking(start_time, now)

        if actor_role == ActorRole.ADMIN:
            return

        if start_time > now + self.horizon:
            raise HorizonExceeded(start_time, self.horizon)

        duration = end_time - start_time
        if duration > self.max_duration:
            raise DurationExceeded(duration, self.max_duration)

    def check_edit_window(
        self,
        start_time: datetime,
        end_time: datetime,
        actor_role: ActorRole,
    ) -> None:
        """
        Validate the new window of an edited reservation.

        Only ordering and the non-admin duration limit apply, so a booking in
        progress can be extended and one near the horizon can be moved.
        """
        if end_time <= start_time:
            raise InvalidTimeRange(start_time, end_time)

        if actor_role == ActorRole.ADMIN:
            return

        duration = end_time - start_time
        if duration > self.max_duration:
            raise DurationExceeded(duration, self.max_duration)

    def effective_weeks(self, recurring_weeks: int, actor_role: ActorRole) -> int:
        """Recurrence is an admin privilege; other actors get a single slot."""
        if actor_role == ActorRole.ADMIN:
            return max(recurring_weeks, 1)
        if recurring_weeks > 1:
            logger.info(
                "Ignoring recurring_weeks=%d for non-admin request", recurring_weeks
            )
        return 1


def check_slot(
    slot: Slot,
    room: RoomRecord,
    requested_type: ReservationType,
    participant_count: int,
    booked: Iterable[BookedSlot],
    slot_index: int = 0,
    series_length: int = 1,
) -> None:
    """
    Check one slot against the reservations already on the room.

    Raises:
        Conflict: the slot overlaps an incompatible reservation
        CapacityExceeded: shared participants would exceed room capacity
    """
    overlapping = [
        r
        for r in booked
        if r.status == ReservationStatus.CONFIRMED
        and overlaps(slot.start, slot.end, r.start_time, r.end_time)
    ]
    recurring = series_length > 1

    if requested_type == ReservationType.EXCLUSIVE:
        if overlapping:
            if recurring:
                message = (
                    f"Conflict found for date {slot.start.date().isoformat()}. "
                    "Recurring booking failed."
                )
            else:
                message = "Time slot already booked"
            raise Conflict(
                message,
                slot_index=slot_index,
                slot_start=slot.start,
                conflicting_type=ReservationType(overlapping[0].type),
            )
        return

    if any(r.type == ReservationType.EXCLUSIVE for r in overlapping):
        message = "Cannot book shared reservation: time slot has an exclusive booking"
        if recurring:
            message += f" on {slot.start.date().isoformat()}"
        raise Conflict(
            message,
            slot_index=slot_index,
            slot_start=slot.start,
            conflicting_type=ReservationType.EXCLUSIVE,
        )

    current = sum(
        r.participant_count or 1
        for r in overlapping
        if r.type == ReservationType.SHARED
    )
    if current + participant_count > room.capacity:
        raise CapacityExceeded(
            requested=participant_count,
            available=room.capacity - current,
            slot_index=slot_index,
            slot_start=slot.start,
            recurring=recurring,
        )


class ReservationPlanner:
    """
    Single entry point for validating new, recurring and edited reservations.

    Args:
        find_room: async lookup returning the room or None
        find_overlapping: async query returning confirmed reservations on a
            room that overlap [start, end), excluding the given reservation id
        policy: booking limits; defaults to 7 days ahead and 5 hours long
        tz: zone whose wall-clock time weekly series keep; None steps in UTC
    """

    def __init__(
        self,
        find_room: FindRoom,
        find_overlapping: FindOverlapping,
        policy: BookingPolicy | None = None,
        tz: tzinfo | None = None,
    ):
        self.find_room = find_room
        self.find_overlapping = find_overlapping
        self.policy = policy or BookingPolicy()
        self.tz = tz

    async def _get_room(self, room_id: int) -> RoomRecord:
        room = await self.find_room(room_id)
        if room is None:
            raise RoomNotFound(room_id)
        return room

    async def _booked_on(
        self,
        room_id: int,
        slot: Slot,
        exclude_reservation_id: int | None = None,
    ) -> list[BookedSlot]:
        booked = await self.find_overlapping(
            room_id, slot.start, slot.end, exclude_reservation_id
        )
        if exclude_reservation_id is None:
            return list(booked)
        return [
            r
            for r in booked
            if getattr(r, "reservation_id", None) != exclude_reservation_id
        ]

    async def plan(self, request: BookingRequest, now: datetime) -> list[ReservationDraft]:
        """
        Plan a new (optionally recurring) booking.

        Policy is checked once against the base window. Every weekly slot is
        then checked in order; the first failure rejects the whole series.

        Returns:
            One draft per slot, in chronological order
        """
        self.policy.check_window(
            request.start_time, request.end_time, request.actor_role, now
        )
        weeks = self.policy.effective_weeks(request.recurring_weeks, request.actor_role)

        room = await self._get_room(request.room_id)
        if not room.is_available:
            raise RoomUnavailable(request.room_id)

        drafts: list[ReservationDraft] = []
        for index, slot in enumerate(
            expand_slots(request.start_time, request.end_time, weeks, self.tz)
        ):
            booked = await self._booked_on(request.room_id, slot)
            # Earlier slots of the same series count as booked
            booked.extend(drafts)
            check_slot(
                slot,
                room,
                request.type,
                request.participant_count,
                booked,
                slot_index=index,
                series_length=weeks,
            )
            drafts.append(
                ReservationDraft(
                    room_id=request.room_id,
                    user_id=request.actor_id,
                    band_id=request.band_id,
                    band_name=request.band_name,
                    contact_info=request.contact_info,
                    purpose=request.purpose,
                    start_time=slot.start,
                    end_time=slot.end,
                    type=request.type,
                    participant_count=request.participant_count,
                )
            )

        logger.info(
            "Planned %d %s reservation(s) for room %s by %s",
            len(drafts),
            request.type.value,
            request.room_id,
            request.actor_id,
        )
        return drafts

    async def plan_edit(
        self,
        existing: EditableReservation,
        changes: ReservationChanges,
        actor_role: ActorRole,
        now: datetime,
    ) -> ReservationDraft:
        """
        Plan an edit of a stored reservation.

        New times apply only when both start and end are given. If the window
        moves, its order and (for non-admins) its length are checked; the past
        and horizon limits apply to new bookings only. Conflict and capacity checks run
        whenever time, type or participant count is supplied, with the edited
        reservation excluded from its own overlap set.

        Returns:
            The merged reservation state to write back
        """
        if existing.status != ReservationStatus.CONFIRMED:
            raise InvalidReservationState(
                existing.reservation_id, ReservationStatus(existing.status).value
            )

        start_time, end_time = existing.start_time, existing.end_time
        time_supplied = changes.start_time is not None and changes.end_time is not None
        if time_supplied:
            start_time, end_time = changes.start_time, changes.end_time
            if (start_time, end_time) != (existing.start_time, existing.end_time):
                self.policy.check_edit_window(start_time, end_time, actor_role)

        new_type = ReservationType(changes.type or existing.type)
        participant_count = (
            changes.participant_count or existing.participant_count or 1
        )

        draft = ReservationDraft(
            room_id=existing.room_id,
            user_id=existing.user_id,
            band_id=existing.band_id,
            band_name=(
                changes.band_name
                if changes.band_name is not None
                else existing.band_name
            ),
            contact_info=(
                changes.contact_info
                if changes.contact_info is not None
                else existing.contact_info
            ),
            purpose=changes.purpose if changes.purpose is not None else existing.purpose,
            start_time=start_time,
            end_time=end_time,
            type=new_type,
            participant_count=participant_count,
        )

        if (
            time_supplied
            or changes.type is not None
            or changes.participant_count is not None
        ):
            room = await self._get_room(existing.room_id)
            slot = Slot(start=start_time, end=end_time)
            booked = await self._booked_on(
                existing.room_id, slot, exclude_reservation_id=existing.reservation_id
            )
            check_slot(slot, room, new_type, participant_count, booked)

        return draft
