"""Rooms API endpoints."""

from fastapi import APIRouter, HTTPException, status

from rehearsal.api.v1.dependencies import RoomServiceDep
from rehearsal.planner import utc_now
from rehearsal.schemas.room import CurrentReservation, RoomResponse, RoomStatusResponse

router = APIRouter()


@router.get(
    "",
    response_model=list[RoomResponse],
    summary="List rooms",
)
async def list_rooms(
    room_service: RoomServiceDep,
    available_only: bool = False,
) -> list[RoomResponse]:
    """List rooms sorted by name."""
    rooms = await room_service.get_rooms(available_only=available_only)
    return [RoomResponse.model_validate(r) for r in rooms]


@router.get(
    "/status",
    response_model=list[RoomStatusResponse],
    summary="Room status board",
)
async def get_room_status(room_service: RoomServiceDep) -> list[RoomStatusResponse]:
    """Show which rooms are available, occupied or in maintenance right now."""
    board = await room_service.get_status_board(utc_now())

    return [
        RoomStatusResponse(
            **RoomResponse.model_validate(entry["room"]).model_dump(),
            status=entry["status"],
            current_reservation=(
                CurrentReservation.model_validate(entry["current_reservation"])
                if entry["current_reservation"] is not None
                else None
            ),
        )
        for entry in board
    ]


@router.get(
    "/{room_id}",
    response_model=RoomResponse,
    summary="Get room details",
)
async def get_room(
    room_id: int,
    room_service: RoomServiceDep,
) -> RoomResponse:
    """Get room details by ID."""
    room = await room_service.get_room(room_id)
    if not room:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Room not found",
        )
    return RoomResponse.model_validate(room)
