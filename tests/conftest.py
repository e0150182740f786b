from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from rehearsal.models.room import Room
from rehearsal.planner import BookingPolicy, ReservationPlanner
from tests.helpers import InMemoryStore, make_room


@pytest.fixture
def room() -> Room:
    return make_room()


@pytest.fixture
def store(room) -> InMemoryStore:
    return InMemoryStore(rooms=[room])


@pytest.fixture
def planner(store) -> ReservationPlanner:
    return ReservationPlanner(store.find_room, store.find_overlapping, BookingPolicy())


@pytest.fixture
def redis_client() -> MagicMock:
    """Redis double where every lock is granted and released."""
    client = MagicMock()
    client.set = AsyncMock(return_value=True)
    client.register_script = MagicMock(return_value=AsyncMock(return_value=1))
    return client
