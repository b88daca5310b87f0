"""Booking data models."""

from src.models.booking import Booking, BookingId, bookings_to_payload
from src.models.booking_status import BookingStatus
from src.models.query import (
    BOOKING_PARAMS,
    BookingFilter,
    BookingQuery,
    QueryWindow,
    serialize_params,
)

__all__ = [
    "Booking",
    "BookingId",
    "BookingStatus",
    "BookingFilter",
    "BookingQuery",
    "BOOKING_PARAMS",
    "QueryWindow",
    "bookings_to_payload",
    "serialize_params",
]
