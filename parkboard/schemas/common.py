import re
from datetime import datetime
from typing import Annotated, Any, Generic, TypeVar

from pydantic import AwareDatetime, BaseModel, BeforeValidator, ConfigDict

T = TypeVar("T")

_NUMERIC = re.compile(r"^\s*[+-]?\d+(\.\d+)?\s*$")


def require_iso_timestamp(value: Any) -> Any:
    """Only ISO 8601 text (or an already-built datetime) may become a timestamp.

    Pydantic would otherwise read numbers and numeric strings as Unix epochs.
    """
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or _NUMERIC.match(value):
        raise ValueError("Input should be an ISO 8601 timestamp")
    try:
        datetime.fromisoformat(value)
    except ValueError:
        raise ValueError("Input should be an ISO 8601 timestamp") from None
    return value


IsoDatetime = Annotated[AwareDatetime, BeforeValidator(require_iso_timestamp)]


class BaseSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True, use_enum_values=False)


class StrictSchema(BaseSchema):
    """Request bodies: unknown fields are rejected rather than ignored."""

    model_config = ConfigDict(from_attributes=True, extra="forbid")


class TimestampSchema(BaseSchema):
    created_at: datetime | None = None
    updated_at: datetime | None = None


class DataResponse(BaseSchema, Generic[T]):
    data: T


class ListResponse(BaseSchema, Generic[T]):
    data: list[T]
    total: int
    page: int
    limit: int
