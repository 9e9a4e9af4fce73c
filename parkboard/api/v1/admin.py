import uuid

from fastapi import APIRouter, Query

from parkboard.core.dependencies import DB, AdminCaller, Bookings, Pagination
from parkboard.schemas.booking import BookingResponse, BookingStatusUpdate
from parkboard.schemas.common import DataResponse, ListResponse
from parkboard.schemas.community import CommunityCreate, CommunityResponse, CommunityUpdate
from parkboard.schemas.slot import SlotResponse, SlotStatusUpdate
from parkboard.schemas.user import AdminUserUpdate, UserResponse
from parkboard.services import booking as booking_service
from parkboard.services import community as community_service
from parkboard.services import slot as slot_service
from parkboard.services import user as user_service
from parkboard.utils.constants import BookingStatus, SlotStatus, UserRole

router = APIRouter(prefix="/admin", tags=["Admin"])


# Communities
@router.get("/communities", response_model=DataResponse[list[CommunityResponse]])
async def list_communities(db: DB, admin: AdminCaller):
    communities = await community_service.list_communities(db)
    return DataResponse[list[CommunityResponse]](data=communities)


@router.post("/communities", response_model=DataResponse[CommunityResponse], status_code=201)
async def create_community(db: DB, admin: AdminCaller, data: CommunityCreate):
    community = await community_service.create_community(db, data)
    return DataResponse[CommunityResponse](data=community)


@router.patch("/communities/{code}", response_model=DataResponse[CommunityResponse])
async def update_community(db: DB, admin: AdminCaller, code: str, data: CommunityUpdate):
    community = await community_service.update_community(db, code, data)
    return DataResponse[CommunityResponse](data=community)


# Users
@router.get("/users", response_model=ListResponse[UserResponse])
async def list_users(
    db: DB,
    admin: AdminCaller,
    pagination: Pagination,
    role: UserRole | None = Query(None),
):
    return await user_service.get_users(db, admin, pagination.page, pagination.limit, role)


@router.patch("/users/{user_id}", response_model=DataResponse[UserResponse])
async def update_user(db: DB, admin: AdminCaller, user_id: uuid.UUID, data: AdminUserUpdate):
    user = await user_service.update_user(db, admin, user_id, data)
    return DataResponse[UserResponse](data=user)


# Slots
@router.get("/slots", response_model=ListResponse[SlotResponse])
async def list_slots(
    db: DB,
    admin: AdminCaller,
    pagination: Pagination,
    status: SlotStatus | None = Query(None),
):
    return await slot_service.get_slots(
        db, admin, pagination.page, pagination.limit, status=status
    )


@router.patch("/slots/{slot_id}", response_model=DataResponse[SlotResponse])
async def set_slot_status(
    repo: Bookings, admin: AdminCaller, slot_id: uuid.UUID, data: SlotStatusUpdate
):
    slot = await slot_service.admin_set_status(repo, admin, slot_id, data)
    return DataResponse[SlotResponse](data=slot)


# Bookings
@router.get("/bookings", response_model=ListResponse[BookingResponse])
async def list_bookings(
    repo: Bookings,
    admin: AdminCaller,
    pagination: Pagination,
    status: BookingStatus | None = Query(None),
):
    return await booking_service.admin_list_bookings(
        repo, admin, status, pagination.page, pagination.limit
    )


@router.patch("/bookings/{booking_id}", response_model=DataResponse[BookingResponse])
async def update_booking_status(
    repo: Bookings, admin: AdminCaller, booking_id: uuid.UUID, data: BookingStatusUpdate
):
    booking = await booking_service.admin_update_status(repo, admin, booking_id, data.status)
    return DataResponse[BookingResponse](data=booking)
