import uuid

from pydantic import EmailStr, Field

from parkboard.schemas.common import BaseSchema, StrictSchema, TimestampSchema
from parkboard.utils.constants import UserRole


class UserBase(BaseSchema):
    email: EmailStr
    name: str
    phone: str | None = None
    unit_number: str | None = None


class UserResponse(UserBase, TimestampSchema):
    id: uuid.UUID
    community_code: str | None = None
    role: UserRole
    is_active: bool


class ProfileUpdate(StrictSchema):
    """Residents may only change how they are addressed and reached.

    email, unit_number and community_code are not fields here, so sending
    them is rejected as an unknown field.
    """

    name: str | None = Field(default=None, min_length=1)
    phone: str | None = Field(default=None, pattern=r"^[\d\s\-\+\(\)]+$")


class AdminUserUpdate(StrictSchema):
    role: UserRole | None = None
    is_active: bool | None = None
