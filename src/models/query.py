"""Query parameter models for the Beds24 bookings resource."""

from datetime import date
from enum import Enum
from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Every bookings filter the provider accepts (Beds24 API v2)
BOOKING_PARAMS = (
    "filter", "status", "channel",
    "propertyId", "roomId", "id", "masterId", "apiReference",
    "arrival", "arrivalFrom", "arrivalTo",
    "departure", "departureFrom", "departureTo",
    "bookingTimeFrom", "bookingTimeTo",
    "modifiedFrom", "modifiedTo",
    "searchString",
    "includeInvoiceItems", "includeInfoItems", "includeGuests", "includeBookingGroup",
    "page",
)


class BookingFilter(str, Enum):
    """Predefined provider filters."""

    CURRENT = "current"
    ARRIVALS = "arrivals"
    DEPARTURES = "departures"
    NEW = "new"


def serialize_params(params: dict[str, Any]) -> dict[str, str]:
    """Render query parameters, dropping None and empty values.

    Booleans are rendered as 'true'/'false', enums by value.
    """
    rendered = {}
    for key, value in params.items():
        if value is None or value == "":
            continue
        if isinstance(value, bool):
            rendered[key] = "true" if value else "false"
        elif isinstance(value, Enum):
            rendered[key] = str(value.value)
        else:
            rendered[key] = str(value)
    return rendered


class BookingQuery(BaseModel):
    """Filter set for one bookings query."""

    filter: Optional[BookingFilter] = None
    status: Optional[str] = None
    channel: Optional[str] = None
    property_id: Optional[int] = Field(None, alias="propertyId")
    room_id: Optional[Union[int, str]] = Field(None, alias="roomId")
    id: Optional[Union[int, str]] = None
    master_id: Optional[Union[int, str]] = Field(None, alias="masterId")
    api_reference: Optional[str] = Field(None, alias="apiReference")
    arrival: Optional[str] = None
    arrival_from: Optional[str] = Field(None, alias="arrivalFrom")
    arrival_to: Optional[str] = Field(None, alias="arrivalTo")
    departure: Optional[str] = None
    departure_from: Optional[str] = Field(None, alias="departureFrom")
    departure_to: Optional[str] = Field(None, alias="departureTo")
    booking_time_from: Optional[str] = Field(None, alias="bookingTimeFrom")
    booking_time_to: Optional[str] = Field(None, alias="bookingTimeTo")
    modified_from: Optional[str] = Field(None, alias="modifiedFrom")
    modified_to: Optional[str] = Field(None, alias="modifiedTo")
    search_string: Optional[str] = Field(None, alias="searchString")
    include_invoice_items: Optional[bool] = Field(None, alias="includeInvoiceItems")
    include_info_items: Optional[bool] = Field(None, alias="includeInfoItems")
    include_guests: Optional[bool] = Field(None, alias="includeGuests")
    include_booking_group: Optional[bool] = Field(None, alias="includeBookingGroup")
    page: Optional[int] = None

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator(
        "arrival", "arrival_from", "arrival_to", "departure", "departure_from", "departure_to",
        mode="before",
    )
    @classmethod
    def validate_civil_date(cls, value: Any) -> Any:
        """Arrival and departure bounds must be YYYY-MM-DD."""
        if isinstance(value, date):
            return value.isoformat()
        if isinstance(value, str) and value:
            date.fromisoformat(value)
        return value

    @classmethod
    def from_request(cls, query: dict[str, Any], **overrides: Any) -> "BookingQuery":
        """Build a query from request parameters.

        Unknown keys, empty values and 'page' are ignored.

        Raises:
            pydantic.ValidationError: If a filter name or date bound is invalid
        """
        values = {
            k: v for k, v in query.items() if k in BOOKING_PARAMS and k != "page" and v not in (None, "")
        }
        values.update(overrides)
        return cls(**values)

    def has_date_filters(self) -> bool:
        """True when any arrival/departure range bound is set."""
        return any(
            (self.arrival_from, self.arrival_to, self.departure_from, self.departure_to)
        )

    def merged(self, **changes: Any) -> "BookingQuery":
        """Copy of this query with the given fields (by alias or name) replaced."""
        data = self.model_dump(by_alias=True, exclude_none=True)
        data.update(changes)
        return BookingQuery(**data)

    def to_params(self) -> dict[str, str]:
        """Provider query parameters, empty values omitted."""
        return serialize_params(self.model_dump(by_alias=True, exclude_none=True))


class QueryWindow(BaseModel):
    """Civil date window on the arrival or departure dimension."""

    date_from: str
    date_to: str
    dimension: Literal["arrival", "departure"] = "departure"

    def to_params(self) -> dict[str, str]:
        """Provider filter pair for this window."""
        return {
            f"{self.dimension}From": self.date_from,
            f"{self.dimension}To": self.date_to,
        }

    def describe(self) -> dict[str, str]:
        """Window as echoed back in range responses."""
        return {"from": self.date_from, "to": self.date_to, "type": self.dimension}
