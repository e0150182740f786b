"""HTTP translation of reservation rejections."""

import logging
from datetime import datetime

from fastapi import Request, status
from fastapi.responses import JSONResponse

from rehearsal.errors import (
    CapacityExceeded,
    Conflict,
    DurationExceeded,
    HorizonExceeded,
    InvalidReservationState,
    InvalidTimeRange,
    NotOwner,
    PastBooking,
    PlanningError,
    ReservationNotFound,
    RoomNotFound,
    RoomUnavailable,
    StorageFailure,
)
from rehearsal.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)

STATUS_CODES: dict[type[PlanningError], int] = {
    InvalidTimeRange: status.HTTP_400_BAD_REQUEST,
    PastBooking: status.HTTP_400_BAD_REQUEST,
    HorizonExceeded: status.HTTP_400_BAD_REQUEST,
    DurationExceeded: status.HTTP_400_BAD_REQUEST,
    RoomUnavailable: status.HTTP_400_BAD_REQUEST,
    InvalidReservationState: status.HTTP_400_BAD_REQUEST,
    NotOwner: status.HTTP_403_FORBIDDEN,
    RoomNotFound: status.HTTP_404_NOT_FOUND,
    ReservationNotFound: status.HTTP_404_NOT_FOUND,
    Conflict: status.HTTP_409_CONFLICT,
    CapacityExceeded: status.HTTP_409_CONFLICT,
    StorageFailure: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def status_code_for(exc: PlanningError) -> int:
    for error_type in type(exc).__mro__:
        if error_type in STATUS_CODES:
            return STATUS_CODES[error_type]
    return status.HTTP_400_BAD_REQUEST


async def planning_error_handler(request: Request, exc: PlanningError) -> JSONResponse:
    """Render a rejection as an ErrorResponse body."""
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error(f"{exc.kind} on {request.method} {request.url.path}: {exc.message}")

    body = ErrorResponse(error=exc.kind, detail=exc.message, timestamp=datetime.now())
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))
