from pydantic import EmailStr, Field

from parkboard.schemas.common import BaseSchema, StrictSchema
from parkboard.schemas.user import UserResponse


class Token(BaseSchema):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class TokenRefresh(BaseSchema):
    refresh_token: str


class LoginRequest(BaseSchema):
    # Not EmailStr: a malformed login is just a failed login.
    email: str
    password: str


class RegisterRequest(StrictSchema):
    community_code: str = Field(min_length=1)
    email: EmailStr
    password: str
    name: str = Field(min_length=1)
    phone: str = Field(pattern=r"^[\d\s\-\+\(\)]+$")
    unit_number: str = Field(min_length=1, max_length=20)


class RegisterResponse(BaseSchema):
    user: UserResponse
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
