"""Dashboard views: one endpoint per dashboard section."""

import time
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query

from src.api.dependencies import get_view_service
from src.api.responses import live_response
from src.services.booking_views import BookingViewService

router = APIRouter()


@router.get("/overview", summary="In-house guests and today's movements")
async def get_overview(
    date: Optional[str] = None,
    service: BookingViewService = Depends(get_view_service),
) -> dict[str, Any]:
    started = time.perf_counter()
    view = await service.overview(date)
    return live_response(started, **view)


@router.get("/calendar", summary="Bookings overlapping a date window")
async def get_calendar(
    start: Optional[str] = None,
    days: Optional[str] = None,
    service: BookingViewService = Depends(get_view_service),
) -> dict[str, Any]:
    started = time.perf_counter()
    view = await service.calendar(start, days)
    return live_response(started, **view)


@router.get("/movements", summary="Check-ins and check-outs of a date")
async def get_movements(
    date: Optional[str] = None,
    service: BookingViewService = Depends(get_view_service),
) -> dict[str, Any]:
    started = time.perf_counter()
    view = await service.movements(date)
    return live_response(started, **view)


@router.get("/housekeeping", summary="Room turnover of a date")
async def get_housekeeping(
    date: Optional[str] = None,
    service: BookingViewService = Depends(get_view_service),
) -> dict[str, Any]:
    started = time.perf_counter()
    view = await service.housekeeping(date)
    return live_response(started, **view)


@router.get("/revenue", summary="Revenue of departures within a date range")
async def get_revenue(
    date_from: Optional[str] = Query(None, alias="from"),
    date_to: Optional[str] = Query(None, alias="to"),
    service: BookingViewService = Depends(get_view_service),
) -> dict[str, Any]:
    started = time.perf_counter()
    view = await service.revenue(date_from, date_to)
    return live_response(started, **view)


@router.get("/search", summary="Search bookings by text or arrival window")
async def search_bookings(
    q: Optional[str] = None,
    check_in: Optional[str] = Query(None, alias="checkIn"),
    check_out: Optional[str] = Query(None, alias="checkOut"),
    service: BookingViewService = Depends(get_view_service),
) -> dict[str, Any]:
    started = time.perf_counter()
    view = await service.search(q, check_in, check_out)
    return live_response(started, **view)


@router.get("/booking/{booking_id}", summary="Single booking with invoice and info items")
async def get_booking(
    booking_id: str,
    service: BookingViewService = Depends(get_view_service),
) -> dict[str, Any]:
    started = time.perf_counter()
    booking = await service.booking(booking_id)
    return live_response(started, data=booking)
