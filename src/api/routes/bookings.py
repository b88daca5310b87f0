"""Generic booking listing, writes, rooms and the dashboard feed."""

import time
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, Request

from src.api.dependencies import get_view_service
from src.api.responses import live_response
from src.services.booking_views import BookingViewService

router = APIRouter()


@router.get("/getBookings", summary="Bookings matching any provider filter")
async def get_bookings(
    request: Request,
    service: BookingViewService = Depends(get_view_service),
) -> dict[str, Any]:
    started = time.perf_counter()
    listing = await service.list_bookings(dict(request.query_params))
    return live_response(started, **listing)


@router.get("/getBookings/range", summary="Bookings arriving or departing within a range")
async def get_bookings_range(
    date_from: Optional[str] = Query(None, alias="from"),
    date_to: Optional[str] = Query(None, alias="to"),
    range_type: Optional[str] = Query(None, alias="type"),
    service: BookingViewService = Depends(get_view_service),
) -> dict[str, Any]:
    started = time.perf_counter()
    listing = await service.bookings_range(date_from, date_to, range_type)
    return live_response(started, **listing)


@router.post("/bookings", summary="Create or update bookings")
async def create_bookings(
    payload: Any = Body(...),
    service: BookingViewService = Depends(get_view_service),
) -> dict[str, Any]:
    result = await service.create_bookings(payload)
    return {"success": True, "data": result}


@router.get("/getRooms", summary="Room types and units of the property")
async def get_rooms(service: BookingViewService = Depends(get_view_service)) -> dict[str, Any]:
    started = time.perf_counter()
    rooms = await service.rooms()
    return live_response(started, count=len(rooms), data=rooms)


@router.get("/dashboard/data", summary="Dashboard feed, tolerant of partial failures")
async def get_dashboard_data(
    service: BookingViewService = Depends(get_view_service),
) -> dict[str, Any]:
    started = time.perf_counter()
    feed = await service.dashboard_data()
    return live_response(started, **feed)
