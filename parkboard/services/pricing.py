from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")
SECONDS_PER_HOUR = Decimal(3600)


def duration_hours(start: datetime, end: datetime) -> Decimal:
    """Length of ``[start, end)`` in hours, keeping fractional hours."""
    seconds = Decimal(str((end - start).total_seconds()))
    return seconds / SECONDS_PER_HOUR


def calculate_price(hourly_rate: Decimal, start: datetime, end: datetime) -> Decimal:
    """Total price for renting a slot from ``start`` to ``end``.

    ``hourly_rate * hours``, rounded half-up to cents. The rate must come from
    the stored slot, never from the request.
    """
    rate = hourly_rate if isinstance(hourly_rate, Decimal) else Decimal(str(hourly_rate))
    if rate <= 0:
        raise ValueError("Hourly rate must be greater than 0")
    if end <= start:
        raise ValueError("End time must be after start time")

    return (rate * duration_hours(start, end)).quantize(CENT, rounding=ROUND_HALF_UP)
