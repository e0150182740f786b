"""Per-room booking lock held in Redis."""

import asyncio
import logging
import uuid
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import redis.asyncio as redis

from rehearsal.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

# Delete the key only while it still holds our token
RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
else
    return 0
end
"""


class DistributedLockError(Exception):
    """Exception raised when lock acquisition fails."""

    pass


def room_lock_key(room_id: int) -> str:
    return f"lock:room:{room_id}"


class RoomLock:
    """
    Lock serializing booking changes on one room.

    Taken with SET NX EX, so a lock abandoned by a crashed worker expires
    after `timeout_seconds`. Only the holder's token can release it.
    """

    def __init__(
        self,
        redis_client: redis.Redis,
        room_id: int,
        timeout_seconds: int | None = None,
    ):
        self.redis = redis_client
        self.room_id = room_id
        self.key = room_lock_key(room_id)
        self.timeout_seconds = timeout_seconds or settings.LOCK_TIMEOUT_SECONDS
        self.token: str | None = None
        self._release = self.redis.register_script(RELEASE_SCRIPT)

    async def _try_set(self, token: str) -> bool:
        return bool(
            await self.redis.set(self.key, token, nx=True, ex=self.timeout_seconds)
        )

    async def acquire(self, blocking: bool = True) -> bool:
        """
        Take the room lock.

        A blocking call retries every LOCK_RETRY_DELAY_MS, up to
        LOCK_MAX_RETRIES times after the first attempt.
        """
        token = str(uuid.uuid4())
        attempts = 1 + (settings.LOCK_MAX_RETRIES if blocking else 0)

        for attempt in range(attempts):
            if attempt:
                await asyncio.sleep(settings.LOCK_RETRY_DELAY_MS / 1000)
            if await self._try_set(token):
                self.token = token
                return True

        logger.debug("Room %s still locked after %d attempt(s)", self.room_id, attempts)
        return False

    async def release(self) -> bool:
        """Release the lock; False if it was not held or had already expired."""
        if self.token is None:
            return False

        token, self.token = self.token, None
        released = await self._release(keys=[self.key], args=[token])
        if not released:
            logger.warning("Lock on room %s expired before release", self.room_id)
        return bool(released)


@asynccontextmanager
async def room_lock(
    redis_client: redis.Redis,
    room_id: int,
    timeout_seconds: int | None = None,
    blocking: bool = True,
) -> AsyncGenerator[RoomLock, None]:
    """
    Hold the room lock for the duration of the block.

    Usage:
        async with room_lock(redis, room_id):
            # read overlaps, validate, insert
            ...

    Raises:
        DistributedLockError: If the lock cannot be acquired
    """
    lock = RoomLock(redis_client, room_id, timeout_seconds)
    if not await lock.acquire(blocking=blocking):
        raise DistributedLockError(f"Failed to acquire lock for room: {room_id}")

    try:
        yield lock
    finally:
        await lock.release()
