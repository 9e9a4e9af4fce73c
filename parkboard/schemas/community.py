from pydantic import Field

from parkboard.schemas.common import StrictSchema, TimestampSchema
from parkboard.utils.constants import CommunityStatus


class CommunityCreate(StrictSchema):
    code: str = Field(min_length=3, max_length=50, pattern=r"^[a-z0-9_]+$")
    name: str = Field(min_length=1, max_length=150)
    notes: str | None = None


class CommunityUpdate(StrictSchema):
    name: str | None = Field(default=None, min_length=1, max_length=150)
    status: CommunityStatus | None = None
    notes: str | None = None


class CommunityResponse(TimestampSchema):
    code: str
    name: str
    status: CommunityStatus
    notes: str | None = None
