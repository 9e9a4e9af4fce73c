from fastapi import APIRouter

from parkboard.core.dependencies import DB, CommunityUser
from parkboard.schemas.common import DataResponse
from parkboard.schemas.user import ProfileUpdate, UserResponse
from parkboard.services import user as user_service

router = APIRouter(prefix="/profile", tags=["Profile"])


@router.get("", response_model=DataResponse[UserResponse])
async def get_profile(user: CommunityUser):
    return DataResponse[UserResponse](data=UserResponse.model_validate(user))


@router.patch("", response_model=DataResponse[UserResponse])
async def update_profile(db: DB, user: CommunityUser, data: ProfileUpdate):
    profile = await user_service.update_profile(db, user, data)
    return DataResponse[UserResponse](data=profile)
