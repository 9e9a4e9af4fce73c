"""Booking policy engine.

Each rule below is checked in order and fails fast. Nothing is written
until every check passes; the repository insert is the only mutating step
and it carries the overlap constraint with it.
"""

import logging
import uuid
from typing import Literal

from parkboard.core.dependencies import Caller
from parkboard.core.exceptions import (
    AuthorizationError,
    NotFoundError,
    OverlapConflictError,
    StateConflictError,
    TenancyError,
)
from parkboard.repositories.booking import BookingDraft, BookingRepository
from parkboard.schemas.booking import BookingCreate, BookingResponse
from parkboard.schemas.common import ListResponse
from parkboard.services.pricing import calculate_price
from parkboard.utils.constants import (
    ADMIN_BOOKING_TRANSITIONS,
    BookingStatus,
    SlotStatus,
)

logger = logging.getLogger(__name__)

NOT_AUTHORIZED_TO_CANCEL = "Not authorized to cancel this booking"


async def create_booking(
    repo: BookingRepository, caller: Caller, data: BookingCreate
) -> BookingResponse:
    slot = await repo.get_slot(data.slot_id)
    if slot is None:
        raise NotFoundError("Slot not found")

    # Tenant check first so nothing else about a foreign slot is revealed.
    if slot.community_code != caller.community_code:
        raise TenancyError("Slot not in your community")

    if slot.status != SlotStatus.ACTIVE:
        logger.debug("Rejected booking on slot %s with status %s", slot.id, slot.status)
        raise StateConflictError("Slot is not available")

    if slot.owner_id is not None and slot.owner_id == caller.user_id:
        raise AuthorizationError("Cannot book your own slot")

    if slot.price_per_hour is None:
        raise StateConflictError(
            "Instant booking not supported for this slot; request a quote from the owner"
        )

    draft = BookingDraft(
        slot_id=slot.id,
        renter_id=caller.user_id,
        slot_owner_id=slot.owner_id,
        start_time=data.start_time,
        end_time=data.end_time,
        total_price=calculate_price(slot.price_per_hour, data.start_time, data.end_time),
    )
    try:
        booking = await repo.insert_booking(draft)
    except OverlapConflictError:
        # The failed flush expired every loaded instance; log from the draft.
        logger.info(
            "Overlapping booking rejected for slot %s (%s - %s)",
            draft.slot_id,
            draft.start_time.isoformat(),
            draft.end_time.isoformat(),
        )
        raise

    logger.info(
        "Booking %s created on slot %s by %s for %s",
        booking.id,
        slot.id,
        caller.user_id,
        booking.total_price,
    )
    return BookingResponse.model_validate(booking)


async def cancel_booking(
    repo: BookingRepository, caller: Caller, booking_id: uuid.UUID
) -> BookingResponse:
    found = await repo.get_booking_with_slot(booking_id)
    if found is None:
        raise NotFoundError("Booking not found")
    booking, slot = found

    # Foreign-tenant bookings get the same answer as bookings the caller is not party to.
    if slot.community_code != caller.community_code:
        raise TenancyError(NOT_AUTHORIZED_TO_CANCEL)

    is_renter = booking.renter_id == caller.user_id
    is_owner = booking.slot_owner_id is not None and booking.slot_owner_id == caller.user_id
    if not (is_renter or is_owner):
        raise AuthorizationError(NOT_AUTHORIZED_TO_CANCEL)

    if booking.status == BookingStatus.CANCELLED:
        return BookingResponse.model_validate(booking)

    if booking.status in (BookingStatus.COMPLETED, BookingStatus.NO_SHOW):
        raise StateConflictError("Cannot cancel completed or no_show bookings")

    updated = await repo.update_booking_status(booking.id, BookingStatus.CANCELLED)
    logger.info(
        "Booking %s cancelled by %s (%s)",
        booking.id,
        caller.user_id,
        "renter" if is_renter else "slot owner",
    )
    return BookingResponse.model_validate(updated)


async def get_booking(
    repo: BookingRepository, caller: Caller, booking_id: uuid.UUID
) -> BookingResponse:
    found = await repo.get_booking_with_slot(booking_id)
    if found is None:
        raise NotFoundError("Booking not found")
    booking, slot = found

    visible = slot.community_code == caller.community_code and (
        caller.is_admin or caller.user_id in (booking.renter_id, booking.slot_owner_id)
    )
    if not visible:
        raise NotFoundError("Booking not found")
    return BookingResponse.model_validate(booking)


async def list_bookings(
    repo: BookingRepository,
    caller: Caller,
    as_role: Literal["renter", "owner"] = "renter",
    status: BookingStatus | None = None,
    page: int = 1,
    limit: int = 20,
) -> ListResponse[BookingResponse]:
    filters = {"community_code": caller.community_code, "status": status}
    if as_role == "owner":
        filters["slot_owner_id"] = caller.user_id
    else:
        filters["renter_id"] = caller.user_id

    total = await repo.count_bookings(**filters)
    bookings = await repo.list_bookings(**filters, offset=(page - 1) * limit, limit=limit)

    return ListResponse[BookingResponse](
        data=[BookingResponse.model_validate(b) for b in bookings],
        total=total,
        page=page,
        limit=limit,
    )


async def admin_list_bookings(
    repo: BookingRepository,
    caller: Caller,
    status: BookingStatus | None = None,
    page: int = 1,
    limit: int = 20,
) -> ListResponse[BookingResponse]:
    total = await repo.count_bookings(community_code=caller.community_code, status=status)
    bookings = await repo.list_bookings(
        community_code=caller.community_code,
        status=status,
        offset=(page - 1) * limit,
        limit=limit,
    )
    return ListResponse[BookingResponse](
        data=[BookingResponse.model_validate(b) for b in bookings],
        total=total,
        page=page,
        limit=limit,
    )


async def admin_update_status(
    repo: BookingRepository,
    caller: Caller,
    booking_id: uuid.UUID,
    new_status: BookingStatus,
) -> BookingResponse:
    found = await repo.get_booking_with_slot(booking_id)
    if found is None or found[1].community_code != caller.community_code:
        raise NotFoundError("Booking not found")
    booking, _ = found

    old_status = booking.status
    if old_status == new_status:
        return BookingResponse.model_validate(booking)

    if new_status not in ADMIN_BOOKING_TRANSITIONS.get(old_status, frozenset()):
        raise StateConflictError(
            f"Cannot change booking from {old_status.value} to {new_status.value}"
        )

    updated = await repo.update_booking_status(booking.id, new_status)
    logger.info(
        "Booking %s moved %s -> %s by admin %s",
        booking.id,
        old_status.value,
        new_status.value,
        caller.user_id,
    )
    return BookingResponse.model_validate(updated)
