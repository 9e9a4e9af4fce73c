import uuid
from typing import Literal

from fastapi import APIRouter, Query, status

from parkboard.core.dependencies import Bookings, CurrentCaller, Pagination
from parkboard.schemas.booking import BookingCancel, BookingCreate, BookingResponse
from parkboard.schemas.common import DataResponse, ListResponse
from parkboard.services import booking as booking_service
from parkboard.utils.constants import BookingStatus

router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.post(
    "",
    response_model=DataResponse[BookingResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_booking(repo: Bookings, caller: CurrentCaller, data: BookingCreate):
    booking = await booking_service.create_booking(repo, caller, data)
    return DataResponse[BookingResponse](data=booking)


@router.get("", response_model=ListResponse[BookingResponse])
async def list_bookings(
    repo: Bookings,
    caller: CurrentCaller,
    pagination: Pagination,
    role: Literal["renter", "owner"] = Query("renter"),
    status: BookingStatus | None = Query(None),
):
    return await booking_service.list_bookings(
        repo, caller, role, status, pagination.page, pagination.limit
    )


@router.get("/{booking_id}", response_model=DataResponse[BookingResponse])
async def get_booking(repo: Bookings, caller: CurrentCaller, booking_id: uuid.UUID):
    booking = await booking_service.get_booking(repo, caller, booking_id)
    return DataResponse[BookingResponse](data=booking)


@router.patch("/{booking_id}", response_model=DataResponse[BookingResponse])
async def cancel_booking(
    repo: Bookings, caller: CurrentCaller, booking_id: uuid.UUID, data: BookingCancel
):
    booking = await booking_service.cancel_booking(repo, caller, booking_id)
    return DataResponse[BookingResponse](data=booking)
