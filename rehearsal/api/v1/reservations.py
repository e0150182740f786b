"""Reservations API endpoints."""

from datetime import datetime

from fastapi import APIRouter, status

from rehearsal.api.v1.dependencies import (
    CurrentRole,
    CurrentUser,
    ReservationServiceDep,
)
from rehearsal.models.reservation import ReservationStatus
from rehearsal.planner import BookingRequest, ReservationChanges
from rehearsal.schemas.common import SuccessResponse
from rehearsal.schemas.reservation import (
    ReservationCreate,
    ReservationResponse,
    ReservationUpdate,
)

router = APIRouter()


@router.post(
    "",
    response_model=list[ReservationResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Book a room",
)
async def create_reservation(
    reservation_data: ReservationCreate,
    current_user: CurrentUser,
    current_role: CurrentRole,
    reservation_service: ReservationServiceDep,
) -> list[ReservationResponse]:
    """
    Book a room for one slot, or weekly for several weeks (admins only).

    Every slot is checked before anything is stored; if one slot is rejected
    the whole request is rejected.
    """
    request = BookingRequest(
        **reservation_data.model_dump(),
        actor_id=current_user,
        actor_role=current_role,
    )
    reservations = await reservation_service.create_reservations(request)
    return [ReservationResponse.model_validate(r) for r in reservations]


@router.get(
    "",
    response_model=list[ReservationResponse],
    summary="List reservations",
)
async def list_reservations(
    current_user: CurrentUser,
    reservation_service: ReservationServiceDep,
    room_id: int | None = None,
    mine: bool = False,
    active_only: bool = False,
    start_from: datetime | None = None,
    start_until: datetime | None = None,
) -> list[ReservationResponse]:
    """List reservations, optionally for one room or only the caller's."""
    reservations = await reservation_service.list_reservations(
        room_id=room_id,
        user_id=current_user if mine else None,
        status=ReservationStatus.CONFIRMED if active_only else None,
        start_from=start_from,
        start_until=start_until,
    )
    return [ReservationResponse.model_validate(r) for r in reservations]


@router.get(
    "/{reservation_id}",
    response_model=ReservationResponse,
    summary="Get reservation details",
)
async def get_reservation(
    reservation_id: int,
    current_user: CurrentUser,
    reservation_service: ReservationServiceDep,
) -> ReservationResponse:
    """Get reservation details."""
    reservation = await reservation_service.get_reservation(reservation_id)
    return ReservationResponse.model_validate(reservation)


@router.patch(
    "/{reservation_id}",
    response_model=ReservationResponse,
    summary="Edit reservation",
)
async def update_reservation(
    reservation_id: int,
    update_data: ReservationUpdate,
    current_user: CurrentUser,
    current_role: CurrentRole,
    reservation_service: ReservationServiceDep,
) -> ReservationResponse:
    """Change time, type, participants or details of a reservation."""
    reservation = await reservation_service.update_reservation(
        reservation_id=reservation_id,
        changes=ReservationChanges(**update_data.model_dump(exclude_unset=True)),
        actor_id=current_user,
        actor_role=current_role,
    )
    return ReservationResponse.model_validate(reservation)


@router.delete(
    "/{reservation_id}",
    response_model=SuccessResponse,
    summary="Cancel reservation",
)
async def cancel_reservation(
    reservation_id: int,
    current_user: CurrentUser,
    current_role: CurrentRole,
    reservation_service: ReservationServiceDep,
) -> SuccessResponse:
    """Cancel a reservation. The record is kept with status cancelled."""
    await reservation_service.cancel_reservation(
        reservation_id=reservation_id,
        actor_id=current_user,
        actor_role=current_role,
    )
    return SuccessResponse(message="Reservation cancelled successfully")
