import uuid
from collections.abc import AsyncGenerator
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Query
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from parkboard.core.exceptions import AuthenticationError, AuthorizationError, TenancyError
from parkboard.core.security import decode_token
from parkboard.database import async_session_maker
from parkboard.models.user import User
from parkboard.repositories.booking import BookingRepository
from parkboard.utils.constants import UserRole

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


@dataclass(frozen=True)
class Caller:
    """The authenticated identity and the tenant it acts within."""

    user_id: uuid.UUID
    community_code: str
    role: UserRole = UserRole.RESIDENT

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_current_user(
    token: Annotated[str | None, Depends(oauth2_scheme)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    if not token:
        raise AuthenticationError()

    payload = decode_token(token)
    if payload is None:
        raise AuthenticationError()

    if payload.get("type") != "access":
        raise AuthenticationError("Invalid token type")

    try:
        user_id = uuid.UUID(payload.get("sub", ""))
    except ValueError:
        raise AuthenticationError() from None

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if user is None:
        raise AuthenticationError("User not found")

    return user


async def get_current_active_user(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    if not current_user.is_active:
        raise AuthorizationError("Inactive user")
    return current_user


async def get_community_user(
    current_user: Annotated[User, Depends(get_current_active_user)],
) -> User:
    if not current_user.community_code:
        raise TenancyError("No community assigned")
    return current_user


async def get_caller(
    current_user: Annotated[User, Depends(get_community_user)],
) -> Caller:
    return Caller(
        user_id=current_user.id,
        community_code=current_user.community_code,
        role=current_user.role,
    )


async def get_admin_caller(
    caller: Annotated[Caller, Depends(get_caller)],
) -> Caller:
    if not caller.is_admin:
        raise AuthorizationError("Admin access required")
    return caller


async def get_booking_repository(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> BookingRepository:
    return BookingRepository(db)


class PaginationParams:
    def __init__(
        self,
        page: Annotated[int, Query(ge=1)] = 1,
        limit: Annotated[int, Query(ge=1, le=100)] = 20,
    ):
        self.page = page
        self.limit = limit
        self.offset = (page - 1) * limit


# Type aliases for cleaner dependency injection
DB = Annotated[AsyncSession, Depends(get_db)]
ActiveUser = Annotated[User, Depends(get_current_active_user)]
CommunityUser = Annotated[User, Depends(get_community_user)]
CurrentCaller = Annotated[Caller, Depends(get_caller)]
AdminCaller = Annotated[Caller, Depends(get_admin_caller)]
Bookings = Annotated[BookingRepository, Depends(get_booking_repository)]
Pagination = Annotated[PaginationParams, Depends()]
