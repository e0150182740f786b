"""API v1 routers package."""

from rehearsal.api.v1.reservations import router as reservations_router
from rehearsal.api.v1.rooms import router as rooms_router

__all__ = [
    "rooms_router",
    "reservations_router",
]
