"""Pydantic models for Beds24 booking records."""

from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.models.booking_status import BookingStatus

BookingId = Union[int, str]


class Booking(BaseModel):
    """Booking record as returned by the Beds24 bookings resource.

    Only the fields the aggregation views read are declared. Every other
    provider field is kept as an extra and passed through untouched, so a
    booking serializes back to the payload the provider sent.
    """

    id: Optional[BookingId] = None
    property_id: Optional[BookingId] = Field(None, alias="propertyId")
    room_id: Optional[BookingId] = Field(None, alias="roomId")
    unit_id: Optional[BookingId] = Field(None, alias="unitId")
    master_id: Optional[BookingId] = Field(None, alias="masterId")
    arrival: Optional[str] = None  # YYYY-MM-DD
    departure: Optional[str] = None  # YYYY-MM-DD
    status: Optional[str] = None
    channel: Optional[str] = None
    first_name: Optional[str] = Field(None, alias="firstName")
    last_name: Optional[str] = Field(None, alias="lastName")
    # Raw provider values; may be numbers, numeric strings or garbage
    price: Any = None
    deposit: Any = None
    booking_time: Optional[str] = Field(None, alias="bookingTime")
    modified_time: Optional[str] = Field(None, alias="modifiedTime")
    cancel_time: Optional[str] = Field(None, alias="cancelTime")
    invoice_items: Optional[list[dict[str, Any]]] = Field(None, alias="invoiceItems")
    info_items: Optional[list[dict[str, Any]]] = Field(None, alias="infoItems")

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @field_validator("arrival", "departure", mode="before")
    @classmethod
    def trim_date(cls, v):
        """Keep only the date part of datetime-like strings."""
        if isinstance(v, str) and len(v) > 10 and v[4] == "-":
            return v[:10]
        return v

    @property
    def is_cancelled(self) -> bool:
        """True when the provider reports the booking as cancelled."""
        return BookingStatus.is_cancelled(self.status)

    @property
    def guest_name(self) -> str:
        """Guest full name, or 'Unknown' when the provider sent none."""
        name = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return name or "Unknown"

    def to_payload(self) -> dict[str, Any]:
        """Serialize back to the provider's field names."""
        return self.model_dump(by_alias=True, exclude_unset=True)


def bookings_to_payload(bookings: list[Booking]) -> list[dict[str, Any]]:
    """Serialize a list of bookings for a JSON response."""
    return [booking.to_payload() for booking in bookings]
