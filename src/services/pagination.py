"""Sequential page walker for the bookings resource."""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from structlog import get_logger

from src.clients.beds24_client import Beds24Client
from src.config import settings
from src.models.booking import Booking
from src.models.query import BookingQuery

logger = get_logger(__name__)


@dataclass
class PageWalkResult:
    """All records of one logical query."""

    bookings: list[Booking] = field(default_factory=list)
    total_pages: int = 1


class PaginationWalker:
    """Fetches every page of a bookings query, one page at a time.

    Pages are requested strictly in order since each request depends on the
    previous page's nextPageExists flag. The walk stops after max_pages even
    if the provider keeps reporting more pages.
    """

    def __init__(
        self,
        client: Beds24Client,
        resource: str = "bookings",
        page_delay: Optional[float] = None,
    ):
        """Initialize the walker.

        Args:
            client: Beds24 client used for every page
            resource: Provider resource to walk
            page_delay: Seconds to wait between pages, defaults to settings
        """
        self.client = client
        self.resource = resource
        self.page_delay = settings.pagination.page_delay_seconds if page_delay is None else page_delay

    async def fetch_all_pages(
        self,
        query: Union[BookingQuery, dict[str, Any]],
        max_pages: Optional[int] = None,
    ) -> PageWalkResult:
        """Fetch all pages of a query.

        Args:
            query: Filters applied to every page ('page' is overwritten)
            max_pages: Page cap, defaults to settings

        Returns:
            Concatenated records in provider order and the number of pages fetched

        Raises:
            UpstreamUnreachable: If any page cannot be fetched
            UpstreamRequestFailed: If the provider rejects any page
        """
        max_pages = max_pages or settings.pagination.default_max_pages
        params = query.to_params() if isinstance(query, BookingQuery) else dict(query)

        bookings: list[Booking] = []
        page = 1
        while True:
            logger.debug("Fetching bookings page", page=page, max_pages=max_pages)
            response = await self.client.query(self.resource, {**params, "page": page})
            bookings.extend(Booking.model_validate(record) for record in response.records)

            if not response.pages.next_page_exists:
                break
            if page >= max_pages:
                logger.warning(
                    "Page cap reached with more pages available",
                    max_pages=max_pages,
                    fetched=len(bookings),
                )
                break

            page += 1
            await asyncio.sleep(self.page_delay)

        logger.info("Fetched all pages", pages=page, count=len(bookings))
        return PageWalkResult(bookings=bookings, total_pages=page)
