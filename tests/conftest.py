import json
from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest

from src.clients.beds24_client import PageInfo, UpstreamResponse

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def build_response(records, next_page=False):
    """Wrap records the way the client hands them to callers."""
    records = list(records)
    return UpstreamResponse(
        records=records,
        pages=PageInfo(next_page_exists=next_page),
        raw={"success": True, "data": records},
    )


def booking_record(booking_id, status="confirmed", **fields):
    """Minimal Beds24 booking record."""
    record = {
        "id": booking_id,
        "propertyId": 279646,
        "roomId": 583001,
        "status": status,
        "arrival": "2024-02-01",
        "departure": "2024-02-03",
        "firstName": "Guest",
        "lastName": str(booking_id),
    }
    record.update(fields)
    return record


@pytest.fixture
def bookings_page():
    """Load a Beds24 bookings page from fixture."""
    with open(FIXTURES_DIR / "beds24_api" / "bookings_page.json") as f:
        return json.load(f)


@pytest.fixture
def property_response():
    """Load a Beds24 properties response from fixture."""
    with open(FIXTURES_DIR / "beds24_api" / "property_response.json") as f:
        return json.load(f)


@pytest.fixture
def error_response():
    """Load a Beds24 failure response from fixture."""
    with open(FIXTURES_DIR / "beds24_api" / "error_response.json") as f:
        return json.load(f)


@pytest.fixture
def webhook_booking():
    """Load a Beds24 booking webhook payload from fixture."""
    with open(FIXTURES_DIR / "beds24_api" / "webhook_booking.json") as f:
        return json.load(f)


@pytest.fixture
def make_booking():
    return booking_record


@pytest.fixture
def make_response():
    return build_response


@pytest.fixture
def routed_client():
    """Build a Beds24 client stub answering every bookings query through a route.

    The route receives the serialized query parameters and returns the
    records of the first page (or raises).
    """

    def factory(route):
        async def get_bookings(params=None):
            return build_response(route(params or {}))

        async def query(resource, params=None, method="GET", body=None):
            return build_response(route(params or {}))

        client = Mock()
        client.get_bookings = AsyncMock(side_effect=get_bookings)
        client.query = AsyncMock(side_effect=query)
        client.get_property = AsyncMock(return_value=None)
        client.write_bookings = AsyncMock(return_value=build_response([]))
        return client

    return factory
