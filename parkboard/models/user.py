import uuid

from sqlalchemy import Boolean, ForeignKey, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from parkboard.models.base import BaseModel, enum_type
from parkboard.utils.constants import UserRole


class User(BaseModel):
    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("community_code", "unit_number", name="users_unit_per_community"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    hashed_password: Mapped[str] = mapped_column(String(255))
    name: Mapped[str] = mapped_column(String(255))
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    unit_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    community_code: Mapped[str | None] = mapped_column(
        ForeignKey("communities.code"), nullable=True, index=True
    )
    role: Mapped[UserRole] = mapped_column(enum_type(UserRole), default=UserRole.RESIDENT)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    # Relationships
    community: Mapped["Community | None"] = relationship(back_populates="members")  # noqa: F821
    slots: Mapped[list["ParkingSlot"]] = relationship(back_populates="owner")  # noqa: F821
