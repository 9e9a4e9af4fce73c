from enum import Enum


class UserRole(str, Enum):
    RESIDENT = "resident"
    ADMIN = "admin"


class CommunityStatus(str, Enum):
    ACTIVE = "active"
    DISABLED = "disabled"


class SlotType(str, Enum):
    COVERED = "covered"
    UNCOVERED = "uncovered"
    TANDEM = "tandem"


class SlotStatus(str, Enum):
    ACTIVE = "active"
    MAINTENANCE = "maintenance"
    DISABLED = "disabled"
    DELETED = "deleted"


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    NO_SHOW = "no_show"


# Transitions an admin may apply by hand; renters and owners can only cancel.
ADMIN_BOOKING_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset(
        {BookingStatus.COMPLETED, BookingStatus.NO_SHOW, BookingStatus.CANCELLED}
    ),
}

# Name shared by the Postgres exclusion constraint and the SQLite trigger.
BOOKING_OVERLAP_CONSTRAINT = "bookings_no_overlap"
