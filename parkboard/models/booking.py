import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import DDL, CheckConstraint, ForeignKey, Index, Numeric, Uuid, event, text
from sqlalchemy.dialects.postgresql import ExcludeConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from parkboard.models.base import BaseModel, UTCDateTime, enum_type
from parkboard.utils.constants import BOOKING_OVERLAP_CONSTRAINT, BookingStatus


class Booking(BaseModel):
    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("end_time > start_time", name="bookings_valid_time_range"),
        CheckConstraint("total_price >= 0", name="bookings_non_negative_price"),
        ExcludeConstraint(
            ("slot_id", "="),
            (text("tstzrange(start_time, end_time, '[)')"), "&&"),
            where=text("status <> 'cancelled'"),
            using="gist",
            name=BOOKING_OVERLAP_CONSTRAINT,
        ).ddl_if(dialect="postgresql"),
        Index("ix_bookings_renter_status_start", "renter_id", "status", "start_time"),
        Index("ix_bookings_owner_status", "slot_owner_id", "status"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    slot_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("parking_slots.id", ondelete="CASCADE"), index=True
    )
    renter_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    # Copy of the slot owner when the booking was accepted.
    slot_owner_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    start_time: Mapped[datetime] = mapped_column(UTCDateTime)
    end_time: Mapped[datetime] = mapped_column(UTCDateTime)
    status: Mapped[BookingStatus] = mapped_column(
        enum_type(BookingStatus), default=BookingStatus.PENDING
    )
    total_price: Mapped[Decimal] = mapped_column(Numeric(10, 2))

    # Relationships
    slot: Mapped["ParkingSlot"] = relationship(back_populates="bookings")  # noqa: F821
    renter: Mapped["User"] = relationship(foreign_keys=[renter_id])  # noqa: F821


# SQLite has no exclusion constraints. These triggers run inside the writing
# statement, so the overlap check and the write stay a single atomic step.
_SQLITE_OVERLAP_INSERT = DDL(
    f"""
    CREATE TRIGGER IF NOT EXISTS {BOOKING_OVERLAP_CONSTRAINT}_insert
    BEFORE INSERT ON bookings
    WHEN NEW.status <> 'cancelled'
    BEGIN
        SELECT RAISE(ABORT, '{BOOKING_OVERLAP_CONSTRAINT}')
        WHERE EXISTS (
            SELECT 1 FROM bookings
            WHERE slot_id = NEW.slot_id
              AND status <> 'cancelled'
              AND start_time < NEW.end_time
              AND end_time > NEW.start_time
        );
    END
    """
)

_SQLITE_OVERLAP_UPDATE = DDL(
    f"""
    CREATE TRIGGER IF NOT EXISTS {BOOKING_OVERLAP_CONSTRAINT}_update
    BEFORE UPDATE OF slot_id, start_time, end_time, status ON bookings
    WHEN NEW.status <> 'cancelled'
    BEGIN
        SELECT RAISE(ABORT, '{BOOKING_OVERLAP_CONSTRAINT}')
        WHERE EXISTS (
            SELECT 1 FROM bookings
            WHERE slot_id = NEW.slot_id
              AND id <> NEW.id
              AND status <> 'cancelled'
              AND start_time < NEW.end_time
              AND end_time > NEW.start_time
        );
    END
    """
)

event.listen(Booking.__table__, "after_create", _SQLITE_OVERLAP_INSERT.execute_if(dialect="sqlite"))
event.listen(Booking.__table__, "after_create", _SQLITE_OVERLAP_UPDATE.execute_if(dialect="sqlite"))
