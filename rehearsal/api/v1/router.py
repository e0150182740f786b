"""API v1 main router."""

from fastapi import APIRouter

from rehearsal.api.v1.reservations import router as reservations_router
from rehearsal.api.v1.rooms import router as rooms_router

router = APIRouter(prefix="/v1")

router.include_router(rooms_router, prefix="/rooms", tags=["Rooms"])
router.include_router(reservations_router, prefix="/reservations", tags=["Reservations"])
