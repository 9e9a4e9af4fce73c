from parkboard.services import (
    auth,
    booking,
    community,
    pricing,
    slot,
    user,
)

__all__ = [
    "auth",
    "user",
    "community",
    "slot",
    "booking",
    "pricing",
]
