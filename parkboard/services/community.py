import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from parkboard.core.exceptions import ConflictError, NotFoundError
from parkboard.models.community import Community
from parkboard.schemas.community import CommunityCreate, CommunityResponse, CommunityUpdate

logger = logging.getLogger(__name__)


async def create_community(db: AsyncSession, data: CommunityCreate) -> CommunityResponse:
    if await db.get(Community, data.code):
        raise ConflictError("Community code already exists")

    community = Community(**data.model_dump())
    db.add(community)
    await db.flush()
    await db.refresh(community)

    logger.info("Community %s created", community.code)
    return CommunityResponse.model_validate(community)


async def list_communities(db: AsyncSession) -> list[CommunityResponse]:
    result = await db.execute(select(Community).order_by(Community.code))
    communities = result.scalars().all()
    return [CommunityResponse.model_validate(c) for c in communities]


async def update_community(
    db: AsyncSession, code: str, data: CommunityUpdate
) -> CommunityResponse:
    community = await db.get(Community, code)
    if not community:
        raise NotFoundError("Community not found")

    for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(community, field, value)

    await db.flush()
    await db.refresh(community)
    return CommunityResponse.model_validate(community)
