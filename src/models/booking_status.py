"""Booking lifecycle statuses reported by Beds24."""

from enum import Enum
from typing import Optional


class BookingStatus(str, Enum):
    """Beds24 booking status values.

    Beds24 reports the status as a lowercase string:
    - confirmed: accepted booking
    - new: unconfirmed booking from a channel or the booking page
    - request: booking request awaiting approval
    - cancelled: cancelled booking
    - black: blocked dates (owner use, maintenance)
    - inquiry: enquiry without commitment

    Channels may report other values; those are kept as raw strings on the
    booking and are never treated as cancelled.
    """

    CONFIRMED = "confirmed"
    NEW = "new"
    REQUEST = "request"
    CANCELLED = "cancelled"
    BLACK = "black"
    INQUIRY = "inquiry"

    @classmethod
    def is_cancelled(cls, status: Optional[str]) -> bool:
        """Check whether a raw status string denotes a cancelled booking."""
        return status == cls.CANCELLED.value
