"""Service status."""

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends

from src.api.dependencies import get_beds24_client, get_event_publisher
from src.clients.beds24_client import Beds24Client
from src.config import settings
from src.services.notifications import EventPublisher
from src.utils.civil_date import now_local, today

router = APIRouter()

ENDPOINTS = {
    "overview": "GET /api/overview?date=",
    "calendar": "GET /api/calendar?start=&days=",
    "movements": "GET /api/movements?date=",
    "housekeeping": "GET /api/housekeeping?date=",
    "revenue": "GET /api/revenue?from=&to=",
    "search": "GET /api/search?q=&checkIn=&checkOut=",
    "booking": "GET /api/booking/{id}",
    "stream": "GET /api/stream",
    "getBookings": "GET /getBookings",
    "getBookingsRange": "GET /getBookings/range?from=&to=&type=",
    "createBooking": "POST /bookings",
    "getRooms": "GET /getRooms",
    "dashboardData": "GET /dashboard/data",
}


@router.get("/", summary="Service status and provider rate limit")
async def get_status(
    client: Beds24Client = Depends(get_beds24_client),
    publisher: EventPublisher = Depends(get_event_publisher),
) -> dict[str, Any]:
    return {
        "status": "ok",
        "environment": settings.environment,
        "propertyId": settings.property.property_id,
        "timezone": settings.property.timezone,
        "today": today(),
        "timestampLocal": now_local().isoformat(),
        "timestampUTC": datetime.now(timezone.utc).isoformat(),
        "rateLimit": client.rate_limit.as_dict(),
        "sseClients": publisher.subscriber_count,
        "endpoints": ENDPOINTS,
    }
