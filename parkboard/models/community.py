from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from parkboard.models.base import BaseModel, enum_type
from parkboard.utils.constants import CommunityStatus


class Community(BaseModel):
    __tablename__ = "communities"

    code: Mapped[str] = mapped_column(String(50), primary_key=True)
    name: Mapped[str] = mapped_column(String(150))
    status: Mapped[CommunityStatus] = mapped_column(
        enum_type(CommunityStatus), default=CommunityStatus.ACTIVE
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    members: Mapped[list["User"]] = relationship(back_populates="community")  # noqa: F821
    slots: Mapped[list["ParkingSlot"]] = relationship(back_populates="community")  # noqa: F821
