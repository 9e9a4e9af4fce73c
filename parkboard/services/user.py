import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from parkboard.core.dependencies import Caller
from parkboard.core.exceptions import NotFoundError, ValidationError
from parkboard.models.user import User
from parkboard.schemas.common import ListResponse
from parkboard.schemas.user import AdminUserUpdate, ProfileUpdate, UserResponse
from parkboard.utils.constants import UserRole


async def update_profile(db: AsyncSession, user: User, data: ProfileUpdate) -> UserResponse:
    update_data = data.model_dump(exclude_unset=True)
    if any(value is None for value in update_data.values()):
        raise ValidationError("Profile fields cannot be null")

    for field, value in update_data.items():
        setattr(user, field, value)

    await db.flush()
    await db.refresh(user)
    return UserResponse.model_validate(user)


async def get_users(
    db: AsyncSession,
    caller: Caller,
    page: int = 1,
    limit: int = 20,
    role: UserRole | None = None,
) -> ListResponse[UserResponse]:
    query = select(User).where(User.community_code == caller.community_code)
    count_query = select(func.count(User.id)).where(User.community_code == caller.community_code)

    if role:
        query = query.where(User.role == role)
        count_query = count_query.where(User.role == role)

    result = await db.execute(count_query)
    total = result.scalar() or 0

    offset = (page - 1) * limit
    result = await db.execute(query.order_by(User.unit_number).offset(offset).limit(limit))
    users = result.scalars().all()

    return ListResponse[UserResponse](
        data=[UserResponse.model_validate(u) for u in users],
        total=total,
        page=page,
        limit=limit,
    )


async def update_user(
    db: AsyncSession, caller: Caller, user_id: uuid.UUID, data: AdminUserUpdate
) -> UserResponse:
    result = await db.execute(
        select(User).where(User.id == user_id, User.community_code == caller.community_code)
    )
    user = result.scalar_one_or_none()
    if not user:
        raise NotFoundError("User not found")

    update_data = data.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in update_data.items():
        setattr(user, field, value)

    await db.flush()
    await db.refresh(user)
    return UserResponse.model_validate(user)
