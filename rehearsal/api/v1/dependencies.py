"""API dependencies."""

from typing import Annotated

import redis.asyncio as redis
from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from rehearsal.database import get_db
from rehearsal.planner import ActorRole
from rehearsal.redis_client import get_redis
from rehearsal.services.reservation_service import ReservationService
from rehearsal.services.room_service import RoomService

# Type aliases
DBSession = Annotated[AsyncSession, Depends(get_db)]
RedisClient = Annotated[redis.Redis, Depends(get_redis)]


async def get_current_user_id(
    x_user_id: Annotated[str | None, Header()] = None,
) -> str:
    """
    Get current user ID from header.
    Session issuance happens upstream; this service trusts the gateway.
    """
    if not x_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-User-ID header is required",
        )
    return x_user_id


async def get_current_role(
    x_user_role: Annotated[str | None, Header()] = None,
) -> ActorRole:
    """Get actor role from header. Anything but "admin" is a regular user."""
    if x_user_role and x_user_role.lower() == ActorRole.ADMIN.value:
        return ActorRole.ADMIN
    return ActorRole.USER


CurrentUser = Annotated[str, Depends(get_current_user_id)]
CurrentRole = Annotated[ActorRole, Depends(get_current_role)]


def get_room_service(db: DBSession) -> RoomService:
    """Get room service."""
    return RoomService(db)


def get_reservation_service(
    db: DBSession,
    redis_client: RedisClient,
) -> ReservationService:
    """Get reservation service."""
    return ReservationService(db, redis_client)


# Annotated dependencies
RoomServiceDep = Annotated[RoomService, Depends(get_room_service)]
ReservationServiceDep = Annotated[ReservationService, Depends(get_reservation_service)]
