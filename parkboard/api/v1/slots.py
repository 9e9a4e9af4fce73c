import uuid

from fastapi import APIRouter, Query, Response, status

from parkboard.core.dependencies import DB, Bookings, CurrentCaller, Pagination
from parkboard.schemas.common import DataResponse, IsoDatetime, ListResponse
from parkboard.schemas.slot import AvailabilityResponse, SlotCreate, SlotResponse, SlotUpdate
from parkboard.services import slot as slot_service
from parkboard.utils.constants import SlotType

router = APIRouter(prefix="/slots", tags=["Slots"])


@router.get("", response_model=ListResponse[SlotResponse])
async def list_slots(
    db: DB,
    caller: CurrentCaller,
    pagination: Pagination,
    slot_type: SlotType | None = Query(None),
):
    return await slot_service.get_slots(
        db, caller, pagination.page, pagination.limit, slot_type=slot_type
    )


@router.post(
    "",
    response_model=DataResponse[SlotResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_slot(db: DB, caller: CurrentCaller, data: SlotCreate):
    slot = await slot_service.create_slot(db, caller, data)
    return DataResponse[SlotResponse](data=slot)


@router.get("/{slot_id}", response_model=DataResponse[SlotResponse])
async def get_slot(db: DB, caller: CurrentCaller, slot_id: uuid.UUID):
    slot = await slot_service.get_slot(db, caller, slot_id)
    return DataResponse[SlotResponse](data=slot)


@router.patch("/{slot_id}", response_model=DataResponse[SlotResponse])
async def update_slot(db: DB, caller: CurrentCaller, slot_id: uuid.UUID, data: SlotUpdate):
    slot = await slot_service.update_slot(db, caller, slot_id, data)
    return DataResponse[SlotResponse](data=slot)


@router.delete("/{slot_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_slot(repo: Bookings, caller: CurrentCaller, slot_id: uuid.UUID):
    await slot_service.delete_slot(repo, caller, slot_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{slot_id}/availability", response_model=DataResponse[AvailabilityResponse])
async def check_availability(
    repo: Bookings,
    caller: CurrentCaller,
    slot_id: uuid.UUID,
    start_time: IsoDatetime,
    end_time: IsoDatetime,
):
    availability = await slot_service.check_availability(
        repo, caller, slot_id, start_time, end_time
    )
    return DataResponse[AvailabilityResponse](data=availability)
