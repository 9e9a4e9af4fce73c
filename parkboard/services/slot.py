import logging
import uuid
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from parkboard.core.dependencies import Caller
from parkboard.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from parkboard.models.slot import ParkingSlot
from parkboard.repositories.booking import BookingRepository
from parkboard.schemas.common import ListResponse
from parkboard.schemas.slot import (
    AvailabilityResponse,
    SlotCreate,
    SlotResponse,
    SlotStatusUpdate,
    SlotUpdate,
)
from parkboard.services.pricing import calculate_price
from parkboard.utils.constants import SlotStatus, SlotType

logger = logging.getLogger(__name__)

ACTIVE_BOOKINGS_ON_DELETE = "Cannot delete slot with active bookings"


async def _get_community_slot(
    db: AsyncSession, caller: Caller, slot_id: uuid.UUID, include_deleted: bool = False
) -> ParkingSlot:
    query = select(ParkingSlot).where(
        ParkingSlot.id == slot_id,
        ParkingSlot.community_code == caller.community_code,
    )
    if not include_deleted:
        query = query.where(ParkingSlot.status != SlotStatus.DELETED)
    result = await db.execute(query)
    slot = result.scalar_one_or_none()
    if not slot:
        raise NotFoundError("Slot not found")
    return slot


async def _ensure_unique_number(
    db: AsyncSession, community_code: str, slot_number: str, exclude_id: uuid.UUID | None = None
) -> None:
    query = select(ParkingSlot.id).where(
        ParkingSlot.community_code == community_code,
        ParkingSlot.slot_number == slot_number,
    )
    if exclude_id:
        query = query.where(ParkingSlot.id != exclude_id)
    result = await db.execute(query)
    if result.first():
        raise ValidationError("Slot number already exists")


async def _flush_slot(db: AsyncSession, slot: ParkingSlot) -> None:
    try:
        await db.flush()
    except IntegrityError as exc:
        # Lost a race with another insert of the same slot number.
        raise ValidationError("Slot number already exists") from exc
    await db.refresh(slot)


async def get_slots(
    db: AsyncSession,
    caller: Caller,
    page: int = 1,
    limit: int = 20,
    slot_type: SlotType | None = None,
    status: SlotStatus | None = SlotStatus.ACTIVE,
) -> ListResponse[SlotResponse]:
    query = select(ParkingSlot).where(ParkingSlot.community_code == caller.community_code)
    count_query = select(func.count(ParkingSlot.id)).where(
        ParkingSlot.community_code == caller.community_code
    )

    if status:
        query = query.where(ParkingSlot.status == status)
        count_query = count_query.where(ParkingSlot.status == status)
    if slot_type:
        query = query.where(ParkingSlot.slot_type == slot_type)
        count_query = count_query.where(ParkingSlot.slot_type == slot_type)

    result = await db.execute(count_query)
    total = result.scalar() or 0

    offset = (page - 1) * limit
    result = await db.execute(
        query.order_by(ParkingSlot.created_at.desc()).offset(offset).limit(limit)
    )
    slots = result.scalars().all()

    return ListResponse[SlotResponse](
        data=[SlotResponse.model_validate(s) for s in slots],
        total=total,
        page=page,
        limit=limit,
    )


async def create_slot(db: AsyncSession, caller: Caller, data: SlotCreate) -> SlotResponse:
    await _ensure_unique_number(db, caller.community_code, data.slot_number)

    # Owner and tenant always come from the session.
    slot = ParkingSlot(
        **data.model_dump(),
        owner_id=caller.user_id,
        community_code=caller.community_code,
        status=SlotStatus.ACTIVE,
    )
    db.add(slot)
    await _flush_slot(db, slot)

    logger.info("Slot %s (%s) listed by %s", slot.id, slot.slot_number, caller.user_id)
    return SlotResponse.model_validate(slot)


async def get_slot(db: AsyncSession, caller: Caller, slot_id: uuid.UUID) -> SlotResponse:
    slot = await _get_community_slot(db, caller, slot_id)
    return SlotResponse.model_validate(slot)


async def update_slot(
    db: AsyncSession, caller: Caller, slot_id: uuid.UUID, data: SlotUpdate
) -> SlotResponse:
    slot = await _get_community_slot(db, caller, slot_id)
    if slot.owner_id != caller.user_id:
        raise AuthorizationError("You do not own this slot")

    update_data = data.model_dump(exclude_unset=True)
    if "slot_number" in update_data and update_data["slot_number"] != slot.slot_number:
        await _ensure_unique_number(db, caller.community_code, update_data["slot_number"], slot.id)

    for field, value in update_data.items():
        setattr(slot, field, value)

    await _flush_slot(db, slot)
    return SlotResponse.model_validate(slot)


async def delete_slot(repo: BookingRepository, caller: Caller, slot_id: uuid.UUID) -> None:
    slot = await _get_community_slot(repo.db, caller, slot_id)
    if slot.owner_id != caller.user_id:
        raise AuthorizationError("You do not own this slot")

    if await repo.has_active_bookings(slot.id):
        raise ConflictError(ACTIVE_BOOKINGS_ON_DELETE)

    # Soft delete keeps booking history pointing at a real row.
    slot.status = SlotStatus.DELETED
    await repo.db.flush()
    logger.info("Slot %s deleted by %s", slot.id, caller.user_id)


async def check_availability(
    repo: BookingRepository,
    caller: Caller,
    slot_id: uuid.UUID,
    start_time: datetime,
    end_time: datetime,
) -> AvailabilityResponse:
    if end_time <= start_time:
        raise ValidationError("end_time: End time must be after start time")

    slot = await _get_community_slot(repo.db, caller, slot_id)
    available = slot.status == SlotStatus.ACTIVE and not await repo.has_overlap(
        slot.id, start_time, end_time
    )

    quoted_price = None
    if slot.price_per_hour is not None:
        quoted_price = calculate_price(slot.price_per_hour, start_time, end_time)

    return AvailabilityResponse(
        slot_id=slot.id,
        start_time=start_time,
        end_time=end_time,
        available=available,
        quoted_price=quoted_price,
    )


async def admin_set_status(
    repo: BookingRepository, caller: Caller, slot_id: uuid.UUID, data: SlotStatusUpdate
) -> SlotResponse:
    slot = await _get_community_slot(repo.db, caller, slot_id, include_deleted=True)
    if (
        data.status == SlotStatus.DELETED
        and slot.status != SlotStatus.DELETED
        and await repo.has_active_bookings(slot.id)
    ):
        raise ConflictError(ACTIVE_BOOKINGS_ON_DELETE)

    slot.status = data.status
    await repo.db.flush()
    await repo.db.refresh(slot)
    logger.info("Slot %s set to %s by admin %s", slot.id, data.status.value, caller.user_id)
    return SlotResponse.model_validate(slot)
