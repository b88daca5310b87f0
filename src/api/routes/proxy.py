"""Passthrough to arbitrary provider resources."""

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Request

from src.api.dependencies import get_beds24_client, get_view_service
from src.api.responses import error_response
from src.clients.beds24_client import Beds24Client
from src.services.booking_views import BookingViewService

router = APIRouter()


@router.get("/beds24/{endpoint:path}", summary="Forward a read to any provider resource")
async def proxy_get(
    endpoint: str,
    request: Request,
    client: Beds24Client = Depends(get_beds24_client),
) -> Any:
    response = await client.query(endpoint, dict(request.query_params))
    return response.raw


@router.post("/beds24/{endpoint:path}", summary="Forward a write to any provider resource")
async def proxy_post(
    endpoint: str,
    payload: Any = Body(None),
    client: Beds24Client = Depends(get_beds24_client),
) -> Any:
    response = await client.query(endpoint, method="POST", body=payload)
    return response.raw


@router.post("/", summary="Legacy write entry point (?endpoint=...)")
async def legacy_post(
    endpoint: Optional[str] = None,
    payload: Any = Body(None),
    client: Beds24Client = Depends(get_beds24_client),
    service: BookingViewService = Depends(get_view_service),
):
    if not endpoint:
        return error_response(400, "Missing endpoint parameter")
    if endpoint == "bookings":
        return await service.create_bookings(payload)
    response = await client.query(endpoint, method="POST", body=payload)
    return response.raw
