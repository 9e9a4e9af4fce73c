"""Persistence gateway for the booking pipeline.

Everything the policy engine needs from storage goes through
:class:`BookingRepository`. An instance wraps one request-scoped
``AsyncSession`` and is handed to the service layer explicitly.
"""

import logging
import uuid
from dataclasses import asdict, dataclass
from datetime import datetime
from decimal import Decimal

from sqlalchemy import exists, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.sql import Select

from parkboard.core.exceptions import NotFoundError, OverlapConflictError, PersistenceError
from parkboard.models.booking import Booking
from parkboard.models.slot import ParkingSlot
from parkboard.utils.constants import BOOKING_OVERLAP_CONSTRAINT, BookingStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingDraft:
    slot_id: uuid.UUID
    renter_id: uuid.UUID
    slot_owner_id: uuid.UUID | None
    start_time: datetime
    end_time: datetime
    total_price: Decimal
    status: BookingStatus = BookingStatus.PENDING


def is_overlap_violation(error: IntegrityError) -> bool:
    orig = getattr(error, "orig", None)
    # asyncpg exposes the violated constraint directly; SQLite only has the message.
    constraint_name = getattr(orig, "constraint_name", None)
    if constraint_name is None:
        diag = getattr(orig, "diag", None)
        constraint_name = getattr(diag, "constraint_name", None)
    if constraint_name:
        return constraint_name == BOOKING_OVERLAP_CONSTRAINT
    return BOOKING_OVERLAP_CONSTRAINT in str(orig)


class BookingRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    def _booking_query(self) -> Select:
        return select(Booking).options(selectinload(Booking.slot))

    async def _load(self, booking_id: uuid.UUID) -> Booking:
        result = await self.db.execute(
            self._booking_query()
            .where(Booking.id == booking_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def get_slot(self, slot_id: uuid.UUID) -> ParkingSlot | None:
        result = await self.db.execute(select(ParkingSlot).where(ParkingSlot.id == slot_id))
        return result.scalar_one_or_none()

    async def get_booking_with_slot(
        self, booking_id: uuid.UUID
    ) -> tuple[Booking, ParkingSlot] | None:
        result = await self.db.execute(self._booking_query().where(Booking.id == booking_id))
        booking = result.scalar_one_or_none()
        if booking is None:
            return None
        return booking, booking.slot

    async def insert_booking(self, draft: BookingDraft) -> Booking:
        """Write a booking; the overlap constraint is checked by the same statement.

        Raises :class:`OverlapConflictError` when another non-cancelled booking
        on the slot shares any instant with ``draft``.
        """
        booking = Booking(**asdict(draft))
        self.db.add(booking)
        try:
            await self.db.flush()
        except IntegrityError as exc:
            if is_overlap_violation(exc):
                raise OverlapConflictError() from exc
            logger.exception("Integrity failure inserting booking for slot %s", draft.slot_id)
            raise PersistenceError("Failed to create booking") from exc
        return await self._load(booking.id)

    async def update_booking_status(self, booking_id: uuid.UUID, status: BookingStatus) -> Booking:
        booking = await self.db.get(Booking, booking_id)
        if booking is None:
            raise NotFoundError("Booking not found")

        booking.status = status
        try:
            await self.db.flush()
        except IntegrityError as exc:
            if is_overlap_violation(exc):
                raise OverlapConflictError() from exc
            logger.exception("Integrity failure updating booking %s", booking_id)
            raise PersistenceError("Failed to update booking") from exc
        return await self._load(booking_id)

    def _filtered(
        self,
        query: Select,
        community_code: str | None,
        renter_id: uuid.UUID | None,
        slot_owner_id: uuid.UUID | None,
        status: BookingStatus | None,
    ) -> Select:
        if community_code:
            query = query.join(ParkingSlot, Booking.slot_id == ParkingSlot.id).where(
                ParkingSlot.community_code == community_code
            )
        if renter_id:
            query = query.where(Booking.renter_id == renter_id)
        if slot_owner_id:
            query = query.where(Booking.slot_owner_id == slot_owner_id)
        if status:
            query = query.where(Booking.status == status)
        return query

    async def list_bookings(
        self,
        *,
        community_code: str | None = None,
        renter_id: uuid.UUID | None = None,
        slot_owner_id: uuid.UUID | None = None,
        status: BookingStatus | None = None,
        offset: int = 0,
        limit: int = 20,
    ) -> list[Booking]:
        query = self._filtered(
            self._booking_query(), community_code, renter_id, slot_owner_id, status
        )
        result = await self.db.execute(
            query.order_by(Booking.start_time).offset(offset).limit(limit)
        )
        return list(result.scalars().all())

    async def count_bookings(
        self,
        *,
        community_code: str | None = None,
        renter_id: uuid.UUID | None = None,
        slot_owner_id: uuid.UUID | None = None,
        status: BookingStatus | None = None,
    ) -> int:
        query = self._filtered(
            select(func.count(Booking.id)), community_code, renter_id, slot_owner_id, status
        )
        result = await self.db.execute(query)
        return result.scalar() or 0

    async def has_active_bookings(self, slot_id: uuid.UUID) -> bool:
        result = await self.db.execute(
            select(
                exists().where(
                    Booking.slot_id == slot_id,
                    Booking.status != BookingStatus.CANCELLED,
                )
            )
        )
        return bool(result.scalar())

    async def has_overlap(self, slot_id: uuid.UUID, start_time: datetime, end_time: datetime) -> bool:
        """Read-only availability check. Booking creation never relies on this."""
        result = await self.db.execute(
            select(
                exists().where(
                    Booking.slot_id == slot_id,
                    Booking.status != BookingStatus.CANCELLED,
                    Booking.start_time < end_time,
                    Booking.end_time > start_time,
                )
            )
        )
        return bool(result.scalar())
