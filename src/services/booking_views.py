"""View assemblers: one dashboard view per method, built from live Beds24 data."""

import asyncio
import math
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from pydantic import ValidationError
from structlog import get_logger

from src.clients.beds24_client import Beds24Client
from src.config import settings
from src.models.booking import Booking, bookings_to_payload
from src.models.query import BookingFilter, BookingQuery, QueryWindow
from src.services.merge import exclude_cancelled, merge_bookings
from src.services.pagination import PageWalkResult, PaginationWalker
from src.utils.civil_date import add_days, add_months, parse_civil_date, today

logger = get_logger(__name__)

DEFAULT_CALENDAR_DAYS = 7

# Page caps per view
CALENDAR_MAX_PAGES = 10
REVENUE_MAX_PAGES = 30
SEARCH_MAX_PAGES = 10
RANGE_MAX_PAGES = 30
LISTING_FILTERED_MAX_PAGES = 50
LISTING_HISTORY_MAX_PAGES = 10
LISTING_DEFAULT_MAX_PAGES = 20


class BookingValidationError(Exception):
    """Raised when a view request is missing or has malformed parameters."""

    pass


def to_amount(value: Any) -> float:
    """Read a provider amount; anything non-numeric counts as zero."""
    if isinstance(value, bool) or value is None:
        return 0.0
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return 0.0
    return amount if math.isfinite(amount) else 0.0


@dataclass
class RevenueTotals:
    """Aggregated money fields of a booking set."""

    total_price: float = 0.0
    total_deposit: float = 0.0
    booking_count: int = 0

    @property
    def outstanding(self) -> float:
        return self.total_price - self.total_deposit

    @classmethod
    def from_bookings(cls, bookings: Iterable[Booking]) -> "RevenueTotals":
        totals = cls()
        for booking in bookings:
            totals.total_price += to_amount(booking.price)
            totals.total_deposit += to_amount(booking.deposit)
            totals.booking_count += 1
        return totals

    def as_dict(self) -> dict[str, Any]:
        return {
            "totalPrice": self.total_price,
            "totalDeposit": self.total_deposit,
            "outstanding": self.outstanding,
            "bookingCount": self.booking_count,
        }


def _civil_date(value: Optional[str], name: str) -> str:
    """Validate a YYYY-MM-DD request parameter."""
    try:
        return parse_civil_date(value).isoformat()
    except (TypeError, ValueError) as e:
        raise BookingValidationError(f"Invalid {name} date: {value!r} (expected YYYY-MM-DD)") from e


def _calendar_days(value: Any) -> int:
    """Day count of a calendar window; missing, zero or non-numeric means 7."""
    try:
        days = int(value)
    except (TypeError, ValueError):
        return DEFAULT_CALENDAR_DAYS
    return days or DEFAULT_CALENDAR_DAYS


class BookingViewService:
    """Assembles dashboard views from one or more bookings queries.

    Every query is scoped to the configured property. Parallel fetches of a
    view are all-or-nothing: any failing fetch fails the whole view. The
    dashboard feed is the only exception and degrades a failed fetch to an
    empty set.
    """

    def __init__(
        self,
        client: Beds24Client,
        walker: Optional[PaginationWalker] = None,
        property_id: Optional[int] = None,
    ):
        """Initialize the view service.

        Args:
            client: Beds24 client for single-page fetches
            walker: Pagination walker, defaults to one over the same client
            property_id: Property scope, defaults to settings
        """
        self.client = client
        self.walker = walker or PaginationWalker(client)
        self.property_id = property_id or settings.property.property_id

    def _query(self, **filters: Any) -> BookingQuery:
        return BookingQuery(propertyId=self.property_id, **filters)

    async def _fetch(self, query: BookingQuery) -> list[Booking]:
        """Fetch the first page of a query only."""
        response = await self.client.get_bookings(query.to_params())
        return [Booking.model_validate(record) for record in response.records]

    async def _walk(self, query: BookingQuery, max_pages: int) -> PageWalkResult:
        return await self.walker.fetch_all_pages(query, max_pages=max_pages)

    async def overview(self, date: Optional[str] = None) -> dict[str, Any]:
        """In-house guests plus arrivals and departures of one date."""
        date = _civil_date(date, "date") if date else today()
        logger.info("Building overview", date=date)

        current, arrivals, departures = await asyncio.gather(
            self._fetch(self._query(filter=BookingFilter.CURRENT.value)),
            self._fetch(self._query(arrival=date)),
            self._fetch(self._query(departure=date)),
        )
        current = exclude_cancelled(current)
        arrivals = exclude_cancelled(arrivals)
        departures = exclude_cancelled(departures)

        return {
            "date": date,
            "stats": {
                "occupied": len(current),
                "checkIns": len(arrivals),
                "checkOuts": len(departures),
            },
            "current": bookings_to_payload(current),
            "arrivals": bookings_to_payload(arrivals),
            "departures": bookings_to_payload(departures),
        }

    async def calendar(self, start: Optional[str] = None, days: Any = None) -> dict[str, Any]:
        """Bookings overlapping [start, start + days]."""
        start = _civil_date(start, "start") if start else today()
        days = _calendar_days(days)
        end = add_days(start, days)
        logger.info("Building calendar", start=start, end=end, days=days)

        arrivals, departures, current = await asyncio.gather(
            self._walk(
                self._query(**QueryWindow(date_from=start, date_to=end, dimension="arrival").to_params()),
                CALENDAR_MAX_PAGES,
            ),
            self._walk(
                self._query(**QueryWindow(date_from=start, date_to=end, dimension="departure").to_params()),
                CALENDAR_MAX_PAGES,
            ),
            self._fetch(self._query(filter=BookingFilter.CURRENT.value)),
        )
        bookings = merge_bookings([arrivals.bookings, departures.bookings, current])

        return {
            "dateRange": {"start": start, "end": end, "days": days},
            "count": len(bookings),
            "data": bookings_to_payload(bookings),
        }

    async def movements(self, date: Optional[str] = None) -> dict[str, Any]:
        """Check-ins and check-outs of one date, kept apart."""
        date = _civil_date(date, "date") if date else today()
        logger.info("Building movements", date=date)

        arrivals, departures = await asyncio.gather(
            self._fetch(self._query(arrival=date)),
            self._fetch(self._query(departure=date)),
        )
        arrivals = exclude_cancelled(arrivals)
        departures = exclude_cancelled(departures)

        return {
            "date": date,
            "checkIns": {"count": len(arrivals), "data": bookings_to_payload(arrivals)},
            "checkOuts": {"count": len(departures), "data": bookings_to_payload(departures)},
        }

    async def housekeeping(self, date: Optional[str] = None) -> dict[str, Any]:
        """Room turnover of one date.

        In-house bookings that do not depart on the date are stayovers.
        """
        date = _civil_date(date, "date") if date else today()
        logger.info("Building housekeeping", date=date)

        current, departures, arrivals = await asyncio.gather(
            self._fetch(self._query(filter=BookingFilter.CURRENT.value)),
            self._fetch(self._query(departure=date)),
            self._fetch(self._query(arrival=date)),
        )
        current = exclude_cancelled(current)
        departures = exclude_cancelled(departures)
        arrivals = exclude_cancelled(arrivals)
        stayovers = [booking for booking in current if booking.departure != date]

        return {
            "date": date,
            "summary": {
                "occupied": len(current),
                "departing": len(departures),
                "arriving": len(arrivals),
                "stayovers": len(stayovers),
            },
            "departures": bookings_to_payload(departures),
            "arrivals": bookings_to_payload(arrivals),
            "stayovers": bookings_to_payload(stayovers),
        }

    async def revenue(self, date_from: Optional[str], date_to: Optional[str]) -> dict[str, Any]:
        """Money totals of bookings departing within [from, to].

        Raises:
            BookingValidationError: If either bound is missing or malformed
        """
        if not date_from or not date_to:
            raise BookingValidationError("Required: from and to dates (YYYY-MM-DD)")
        date_from = _civil_date(date_from, "from")
        date_to = _civil_date(date_to, "to")
        logger.info("Building revenue", date_from=date_from, date_to=date_to)

        window = QueryWindow(date_from=date_from, date_to=date_to, dimension="departure")
        result = await self._walk(
            self._query(**window.to_params(), includeInvoiceItems=True),
            REVENUE_MAX_PAGES,
        )
        bookings = exclude_cancelled(result.bookings)

        return {
            "dateRange": {"from": date_from, "to": date_to},
            "totals": RevenueTotals.from_bookings(bookings).as_dict(),
            "bookings": bookings_to_payload(bookings),
        }

    async def search(
        self,
        q: Optional[str] = None,
        check_in: Optional[str] = None,
        check_out: Optional[str] = None,
    ) -> dict[str, Any]:
        """Free-text and/or arrival window search, cancelled bookings included.

        Raises:
            BookingValidationError: If neither a search term nor a check-in date is given
        """
        if not q and not check_in:
            raise BookingValidationError("Required: q (search term) or checkIn date")
        logger.info("Searching bookings", q=q, check_in=check_in, check_out=check_out)

        query = self._query(
            searchString=q or None,
            arrivalFrom=_civil_date(check_in, "checkIn") if check_in else None,
            arrivalTo=_civil_date(check_out, "checkOut") if check_out else None,
        )
        result = await self._walk(query, SEARCH_MAX_PAGES)

        return {
            "query": {"q": q, "checkIn": check_in, "checkOut": check_out},
            "count": len(result.bookings),
            "data": bookings_to_payload(result.bookings),
        }

    async def booking(self, booking_id: str) -> Optional[dict[str, Any]]:
        """One booking with invoice and info items, or None when unknown."""
        logger.info("Fetching booking", booking_id=booking_id)
        bookings = await self._fetch(
            self._query(id=booking_id, includeInvoiceItems=True, includeInfoItems=True)
        )
        return bookings[0].to_payload() if bookings else None

    async def list_bookings(self, filters: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """Generic listing over any provider filters.

        Without a date range or predefined filter the listing covers the last
        month of departures plus the provider's default current/future set.
        Cancelled bookings are kept.
        """
        try:
            query = BookingQuery.from_request(filters or {}, propertyId=self.property_id)
        except ValidationError as e:
            raise BookingValidationError(f"Invalid booking filters: {e.error_count()} error(s)") from e

        if query.has_date_filters() or query.filter:
            logger.info("Listing filtered bookings", params=query.to_params())
            result = await self._walk(query, LISTING_FILTERED_MAX_PAGES)
            bookings = result.bookings
            total_pages = result.total_pages
        else:
            date_to = today()
            history_window = QueryWindow(date_from=add_months(date_to, -1), date_to=date_to)
            logger.info("Listing recent and upcoming bookings", **history_window.describe())

            history, upcoming = await asyncio.gather(
                self._walk(query.merged(**history_window.to_params()), LISTING_HISTORY_MAX_PAGES),
                self._walk(query, LISTING_DEFAULT_MAX_PAGES),
            )
            bookings = merge_bookings(
                [history.bookings, upcoming.bookings], exclude_cancelled_status=False
            )
            total_pages = history.total_pages + upcoming.total_pages

        return {
            "count": len(bookings),
            "totalPages": total_pages,
            "data": bookings_to_payload(bookings),
        }

    async def bookings_range(
        self,
        date_from: Optional[str],
        date_to: Optional[str],
        range_type: Optional[str] = None,
    ) -> dict[str, Any]:
        """Every booking arriving or departing (default) within [from, to].

        Raises:
            BookingValidationError: If either bound is missing or malformed
        """
        if not date_from or not date_to:
            raise BookingValidationError("Required: from and to dates (YYYY-MM-DD format)")
        window = QueryWindow(
            date_from=_civil_date(date_from, "from"),
            date_to=_civil_date(date_to, "to"),
            dimension="arrival" if range_type == "arrival" else "departure",
        )
        logger.info("Fetching booking range", **window.describe())

        result = await self._walk(self._query(**window.to_params()), RANGE_MAX_PAGES)

        return {
            "dateRange": window.describe(),
            "count": len(result.bookings),
            "totalPages": result.total_pages,
            "data": bookings_to_payload(result.bookings),
        }

    async def dashboard_data(self) -> dict[str, Any]:
        """Dashboard feed from the predefined current/arrivals/departures filters.

        A failed fetch degrades to an empty set instead of failing the feed.
        """
        date = today()
        names = (BookingFilter.CURRENT, BookingFilter.ARRIVALS, BookingFilter.DEPARTURES)
        results = await asyncio.gather(
            *(self._fetch(self._query(filter=name.value)) for name in names),
            return_exceptions=True,
        )

        partials: list[list[Booking]] = []
        for name, result in zip(names, results):
            if isinstance(result, Exception):
                logger.warning(
                    "Dashboard fetch failed, using empty set",
                    filter=name.value,
                    error=str(result),
                )
                partials.append([])
            elif isinstance(result, BaseException):
                raise result
            else:
                partials.append(result)

        current, arrivals, departures = (exclude_cancelled(partial) for partial in partials)
        bookings = merge_bookings(partials)

        return {
            "stats": {
                "occupied": len(current),
                "checkInsToday": sum(1 for b in arrivals if b.arrival == date),
                "checkOutsToday": sum(1 for b in departures if b.departure == date),
                "totalActive": len(bookings),
            },
            "data": bookings_to_payload(bookings),
        }

    async def rooms(self) -> list[dict[str, Any]]:
        """Room types of the property with their units and price rules."""
        prop = await self.client.get_property(self.property_id)
        room_types = (prop or {}).get("roomTypes") or []
        return [
            {
                "id": room.get("id"),
                "name": room.get("name"),
                "maxPeople": room.get("maxPeople"),
                "qty": room.get("qty"),
                "units": room.get("units") or [],
                "priceRules": room.get("priceRules") or [],
            }
            for room in room_types
        ]

    async def create_bookings(self, payload: Any) -> Any:
        """Create or update one booking or a batch.

        Bookings without a propertyId are assigned to the configured property.

        Raises:
            BookingValidationError: If the payload is not a booking object or a list of them
        """
        bookings = payload if isinstance(payload, list) else [payload]
        if not bookings or not all(isinstance(b, dict) for b in bookings):
            raise BookingValidationError("Expected a booking object or a list of booking objects")

        bookings = [
            b if b.get("propertyId") else {**b, "propertyId": self.property_id}
            for b in bookings
        ]
        response = await self.client.write_bookings(bookings)
        return response.raw
