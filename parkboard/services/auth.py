import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from parkboard.config import settings
from parkboard.core.exceptions import AuthenticationError, ConflictError, ValidationError
from parkboard.core.security import (
    create_access_token,
    create_refresh_token,
    get_password_hash,
    verify_password,
)
from parkboard.models.community import Community
from parkboard.models.user import User
from parkboard.schemas.auth import LoginRequest, RegisterRequest, Token
from parkboard.schemas.user import UserResponse
from parkboard.utils.constants import CommunityStatus, UserRole

logger = logging.getLogger(__name__)


def _issue_tokens(user: User) -> Token:
    return Token(
        access_token=create_access_token(
            {"sub": str(user.id), "community": user.community_code}
        ),
        refresh_token=create_refresh_token(user.id),
    )


async def register_user(db: AsyncSession, data: RegisterRequest) -> tuple[UserResponse, Token]:
    if len(data.password) < settings.min_password_length:
        raise ValidationError(
            f"Password must be at least {settings.min_password_length} characters long"
        )

    result = await db.execute(
        select(Community).where(
            Community.code == data.community_code,
            Community.status == CommunityStatus.ACTIVE,
        )
    )
    if result.scalar_one_or_none() is None:
        raise ValidationError("Invalid or inactive community code")

    result = await db.execute(select(User).where(User.email == data.email))
    if result.scalar_one_or_none():
        raise ConflictError("Email already registered")

    result = await db.execute(
        select(User).where(
            User.community_code == data.community_code,
            User.unit_number == data.unit_number,
        )
    )
    if result.scalar_one_or_none():
        raise ConflictError("Unit already registered in this community")

    user = User(
        email=data.email,
        hashed_password=get_password_hash(data.password),
        name=data.name,
        phone=data.phone,
        unit_number=data.unit_number,
        community_code=data.community_code,
        role=UserRole.RESIDENT,
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)

    logger.info("Registered user %s in community %s", user.id, user.community_code)
    return UserResponse.model_validate(user), _issue_tokens(user)


async def authenticate_user(db: AsyncSession, data: LoginRequest) -> Token:
    result = await db.execute(select(User).where(User.email == data.email))
    user = result.scalar_one_or_none()

    if not user or not verify_password(data.password, user.hashed_password):
        logger.info("Failed login for %s", data.email)
        raise AuthenticationError("Invalid email or password")

    if not user.is_active:
        raise AuthenticationError("User account is disabled")

    return _issue_tokens(user)


async def refresh_access_token(db: AsyncSession, user_id: uuid.UUID) -> Token:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if not user or not user.is_active:
        raise AuthenticationError("User not found")

    return _issue_tokens(user)
