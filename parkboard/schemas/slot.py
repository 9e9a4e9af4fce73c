import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import Field, computed_field, field_validator

from parkboard.schemas.common import BaseSchema, StrictSchema, TimestampSchema
from parkboard.utils.constants import SlotStatus, SlotType


class SlotCreate(StrictSchema):
    slot_number: str = Field(min_length=1, max_length=20)
    slot_type: SlotType = SlotType.COVERED
    description: str | None = None
    # Omit (or send null) to list the slot as "request a quote".
    price_per_hour: Decimal | None = Field(default=None, gt=0, max_digits=10, decimal_places=2)


class SlotUpdate(StrictSchema):
    slot_number: str | None = Field(default=None, min_length=1, max_length=20)
    slot_type: SlotType | None = None
    description: str | None = None
    price_per_hour: Decimal | None = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    status: SlotStatus | None = None

    @field_validator("status")
    @classmethod
    def status_not_deleted(cls, value: SlotStatus | None) -> SlotStatus | None:
        if value == SlotStatus.DELETED:
            raise ValueError("Use DELETE to remove a slot")
        return value


class SlotStatusUpdate(StrictSchema):
    status: SlotStatus


class SlotSummary(BaseSchema):
    id: uuid.UUID
    slot_number: str
    slot_type: SlotType
    community_code: str


class SlotResponse(TimestampSchema):
    id: uuid.UUID
    slot_number: str
    slot_type: SlotType
    description: str | None = None
    community_code: str
    owner_id: uuid.UUID | None = None
    price_per_hour: float | None = None
    status: SlotStatus

    @computed_field
    @property
    def instant_booking(self) -> bool:
        return self.price_per_hour is not None


class AvailabilityResponse(BaseSchema):
    slot_id: uuid.UUID
    start_time: datetime
    end_time: datetime
    available: bool
    quoted_price: float | None = None
