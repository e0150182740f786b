from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from rehearsal.errors import StorageFailure
from rehearsal.models.reservation import ReservationType
from rehearsal.services.room_service import RoomService, RoomState
from tests.helpers import NOW, at, make_reservation, make_room


@pytest.mark.asyncio
async def test_status_board_reports_each_room_state():
    service = RoomService(MagicMock())
    busy, free, closed = make_room(1), make_room(2), make_room(3, is_available=False)
    early = make_reservation(1, NOW, NOW.replace(hour=10), type=ReservationType.SHARED)
    late = make_reservation(2, NOW, NOW.replace(hour=11), type=ReservationType.SHARED)
    service.get_rooms = AsyncMock(return_value=[busy, free, closed])
    service.get_active_reservations = AsyncMock(return_value=[early, late])

    board = await service.get_status_board(NOW)

    assert [entry["status"] for entry in board] == [
        RoomState.OCCUPIED,
        RoomState.AVAILABLE,
        RoomState.MAINTENANCE,
    ]
    assert board[0]["current_reservation"] is late
    assert board[1]["current_reservation"] is None
    service.get_active_reservations.assert_awaited_once_with(NOW)


@pytest.mark.asyncio
async def test_room_under_maintenance_still_shows_running_booking():
    service = RoomService(MagicMock())
    service.get_rooms = AsyncMock(return_value=[make_room(1, is_available=False)])
    service.get_active_reservations = AsyncMock(
        return_value=[make_reservation(1, NOW, at(10, days=0))]
    )

    board = await service.get_status_board(NOW)

    assert board[0]["status"] == RoomState.OCCUPIED


@pytest.mark.asyncio
async def test_database_outage_becomes_storage_failure():
    db = MagicMock()
    db.execute = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("gone away")))
    service = RoomService(db)

    with pytest.raises(StorageFailure):
        await service.get_rooms()
    with pytest.raises(StorageFailure):
        await service.get_room(1)
    with pytest.raises(StorageFailure):
        await service.get_status_board(NOW)
