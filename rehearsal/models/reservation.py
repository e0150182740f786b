"""Reservation model."""

import enum
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rehearsal.models.base import Base

if TYPE_CHECKING:
    from rehearsal.models.room import Room


class ReservationStatus(str, enum.Enum):
    """Reservation status enum."""

    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class ReservationType(str, enum.Enum):
    """Whether a reservation takes the whole room or a share of its capacity."""

    EXCLUSIVE = "exclusive"
    SHARED = "shared"


class Reservation(Base):
    """Reservation of a room for one [start_time, end_time) window."""

    __tablename__ = "reservations"

    reservation_id: Mapped[int] = mapped_column(
        BigInteger, primary_key=True, autoincrement=True
    )
    room_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("rooms.room_id"), nullable=False
    )
    user_id: Mapped[str] = mapped_column(String(50), nullable=False)
    band_id: Mapped[str | None] = mapped_column(String(50))
    band_name: Mapped[str] = mapped_column(String(255), nullable=False)
    contact_info: Mapped[str | None] = mapped_column(String(255))
    purpose: Mapped[str | None] = mapped_column(String(500))
    start_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    status: Mapped[ReservationStatus] = mapped_column(
        Enum(ReservationStatus), default=ReservationStatus.CONFIRMED
    )
    type: Mapped[ReservationType] = mapped_column(
        Enum(ReservationType), default=ReservationType.EXCLUSIVE
    )
    participant_count: Mapped[int] = mapped_column(Integer, default=1)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.current_timestamp()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        server_default=func.current_timestamp(),
        onupdate=func.current_timestamp(),
    )

    # Relationships
    room: Mapped["Room"] = relationship("Room", back_populates="reservations")

    __table_args__ = (
        CheckConstraint("end_time > start_time", name="ck_reservation_time_order"),
        CheckConstraint("participant_count >= 1", name="ck_reservation_participants"),
        Index("idx_room_status_start", "room_id", "status", "start_time"),
        Index("idx_user_id", "user_id"),
    )
