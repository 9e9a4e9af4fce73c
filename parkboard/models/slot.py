import uuid
from decimal import Decimal

from sqlalchemy import CheckConstraint, ForeignKey, Numeric, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from parkboard.models.base import BaseModel, enum_type
from parkboard.utils.constants import SlotStatus, SlotType


class ParkingSlot(BaseModel):
    __tablename__ = "parking_slots"
    __table_args__ = (
        UniqueConstraint("community_code", "slot_number", name="parking_slots_number_per_community"),
        CheckConstraint(
            "price_per_hour IS NULL OR price_per_hour > 0",
            name="parking_slots_positive_price",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    community_code: Mapped[str] = mapped_column(ForeignKey("communities.code"), index=True)
    owner_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    slot_number: Mapped[str] = mapped_column(String(20))
    slot_type: Mapped[SlotType] = mapped_column(enum_type(SlotType), default=SlotType.COVERED)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    # NULL means "request a quote": the slot cannot be booked instantly.
    price_per_hour: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    status: Mapped[SlotStatus] = mapped_column(
        enum_type(SlotStatus), default=SlotStatus.ACTIVE, index=True
    )

    # Relationships
    community: Mapped["Community"] = relationship(back_populates="slots")  # noqa: F821
    owner: Mapped["User | None"] = relationship(back_populates="slots")  # noqa: F821
    bookings: Mapped[list["Booking"]] = relationship(back_populates="slot")  # noqa: F821
