"""Rejection kinds raised while planning or persisting reservations."""

from datetime import date, datetime, timedelta

from rehearsal.models.reservation import ReservationType


class PlanningError(Exception):
    """Base class for every reservation rejection."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def kind(self) -> str:
        return type(self).__name__


class InvalidTimeRange(PlanningError):
    """End time is not after start time."""

    def __init__(self, start_time: datetime, end_time: datetime):
        super().__init__("End time must be after start time")
        self.start_time = start_time
        self.end_time = end_time


class PastBooking(PlanningError):
    """Requested start lies before the current time."""

    def __init__(self, start_time: datetime, now: datetime):
        super().__init__("Cannot book time slots in the past")
        self.start_time = start_time
        self.now = now


class HorizonExceeded(PlanningError):
    """Non-admin request starts beyond the advance-booking window."""

    def __init__(self, start_time: datetime, horizon: timedelta):
        super().__init__(
            f"Regular users can only book up to {horizon.days} days in advance"
        )
        self.start_time = start_time
        self.horizon = horizon


class DurationExceeded(PlanningError):
    """Non-admin request is longer than the maximum slot duration."""

    def __init__(self, duration: timedelta, max_duration: timedelta):
        hours = max_duration.total_seconds() / 3600
        super().__init__(f"Maximum reservation duration is {hours:g} hours")
        self.duration = duration
        self.max_duration = max_duration


class RoomNotFound(PlanningError):
    def __init__(self, room_id: int):
        super().__init__("Room not found")
        self.room_id = room_id


class RoomUnavailable(PlanningError):
    """Room exists but is closed for maintenance."""

    def __init__(self, room_id: int):
        super().__init__("Room is currently unavailable for booking")
        self.room_id = room_id


class Conflict(PlanningError):
    """
    Requested slot overlaps an incompatible confirmed reservation.

    Attributes:
        slot_index: 0-based position of the failing slot in a recurring series
        slot_start: start of the failing slot
        conflicting_type: type of the reservation that blocks the slot
    """

    def __init__(
        self,
        message: str,
        slot_index: int,
        slot_start: datetime,
        conflicting_type: ReservationType,
    ):
        super().__init__(message)
        self.slot_index = slot_index
        self.slot_start = slot_start
        self.conflicting_type = conflicting_type

    @property
    def slot_date(self) -> date:
        return self.slot_start.date()


class CapacityExceeded(PlanningError):
    """Shared booking would push the room over its capacity."""

    def __init__(
        self,
        requested: int,
        available: int,
        slot_index: int,
        slot_start: datetime,
        recurring: bool = False,
    ):
        message = f"Room capacity exceeded. Available: {available}, Requested: {requested}"
        if recurring:
            message += f" (on {slot_start.date().isoformat()})"
        super().__init__(message)
        self.requested = requested
        self.available = available
        self.slot_index = slot_index
        self.slot_start = slot_start


class ReservationNotFound(PlanningError):
    def __init__(self, reservation_id: int):
        super().__init__("Reservation not found")
        self.reservation_id = reservation_id


class InvalidReservationState(PlanningError):
    """Reservation is cancelled and cannot be changed."""

    def __init__(self, reservation_id: int | None, status: str):
        super().__init__(f"Reservation is {status} and cannot be modified")
        self.reservation_id = reservation_id
        self.status = status


class NotOwner(PlanningError):
    def __init__(self, reservation_id: int):
        super().__init__("Cannot modify another user's reservation")
        self.reservation_id = reservation_id


class StorageFailure(PlanningError):
    """Storage or lock backend failed; the current request is aborted."""

    pass
