import uuid
from datetime import datetime
from typing import Any, Literal

from pydantic import ValidationInfo, field_validator, model_validator
from pydantic_core import PydanticCustomError

from parkboard.schemas.common import BaseSchema, IsoDatetime, StrictSchema, TimestampSchema
from parkboard.schemas.slot import SlotSummary
from parkboard.utils.constants import BookingStatus

# Never trusted from clients; the server always computes the price.
IGNORED_CREATE_FIELDS = ("total_price",)


class BookingCreate(StrictSchema):
    slot_id: uuid.UUID
    start_time: IsoDatetime
    end_time: IsoDatetime

    @model_validator(mode="before")
    @classmethod
    def drop_client_price(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if k not in IGNORED_CREATE_FIELDS}
        return data

    @field_validator("end_time")
    @classmethod
    def end_after_start(cls, value: datetime, info: ValidationInfo) -> datetime:
        start_time = info.data.get("start_time")
        if start_time is not None and value <= start_time:
            raise PydanticCustomError("time_range", "End time must be after start time")
        return value


class BookingCancel(StrictSchema):
    status: Literal["cancelled"]


class BookingStatusUpdate(StrictSchema):
    status: BookingStatus


class BookingResponse(TimestampSchema):
    id: uuid.UUID
    slot_id: uuid.UUID
    renter_id: uuid.UUID
    slot_owner_id: uuid.UUID | None = None
    start_time: datetime
    end_time: datetime
    status: BookingStatus
    total_price: float
    slot: SlotSummary | None = None
