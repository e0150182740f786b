"""Room model."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    CheckConstraint,
    DateTime,
    Index,
    Integer,
    String,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rehearsal.models.base import Base

if TYPE_CHECKING:
    from rehearsal.models.reservation import Reservation


class Room(Base):
    """Rehearsal room that can be booked exclusively or shared up to capacity."""

    __tablename__ = "rooms"

    room_id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    # False while the room is under maintenance
    is_available: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    equipment: Mapped[list[str]] = mapped_column(JSON, default=list)
    image_url: Mapped[str | None] = mapped_column(String(500))
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.current_timestamp()
    )

    # Relationships
    reservations: Mapped[list["Reservation"]] = relationship(
        "Reservation", back_populates="room"
    )

    __table_args__ = (
        CheckConstraint("capacity >= 1", name="ck_room_capacity"),
        Index("idx_room_name", "name"),
    )
