from parkboard.models.booking import Booking
from parkboard.models.community import Community
from parkboard.models.slot import ParkingSlot
from parkboard.models.user import User

__all__ = [
    "Community",
    "User",
    "ParkingSlot",
    "Booking",
]
