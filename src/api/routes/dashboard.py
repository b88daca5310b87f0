"""Dashboard state blobs, housekeeping saves and the room count setting."""

from typing import Any, Optional

from fastapi import APIRouter, Body, Depends
from structlog import get_logger

from src.api.dependencies import get_dashboard_store
from src.api.responses import error_response
from src.clients.redis_store import DashboardStore
from src.config import settings
from src.utils.civil_date import now_local

logger = get_logger(__name__)

router = APIRouter()

DASHBOARD_NAMESPACE = "dashboard"
HOUSEKEEPING_NAMESPACE = "housekeeping"
CONFIG_NAMESPACE = "config"
TOTAL_ROOMS = "total_rooms"
MAX_TOTAL_ROOMS = 100


@router.post("/dashboard/save", summary="Store a dashboard state blob")
async def save_dashboard_state(
    payload: dict[str, Any] = Body(...),
    store: DashboardStore = Depends(get_dashboard_store),
):
    doc_type = payload.get("type")
    if not doc_type:
        return error_response(400, "Missing type")
    await store.save_state(DASHBOARD_NAMESPACE, str(doc_type), payload.get("data"))
    return {"success": True, "type": doc_type}


@router.get("/dashboard/load/{doc_type}", summary="Load a dashboard state blob")
async def load_dashboard_state(
    doc_type: str,
    store: DashboardStore = Depends(get_dashboard_store),
) -> dict[str, Any]:
    document = await store.load_state(DASHBOARD_NAMESPACE, doc_type)
    return {"success": True, "data": document["data"] if document else None}


@router.post("/save", summary="Store a housekeeping blob")
async def save_housekeeping_state(
    payload: dict[str, Any] = Body(...),
    store: DashboardStore = Depends(get_dashboard_store),
):
    doc_type = payload.get("type")
    if not doc_type:
        return error_response(400, "Missing type")
    timestamp = payload.get("timestamp") or now_local().isoformat()
    await store.save_state(
        HOUSEKEEPING_NAMESPACE, str(doc_type), payload.get("data"), timestamp=timestamp
    )
    return {"success": True, "type": doc_type}


@router.get("/load", summary="Load a housekeeping blob")
async def load_housekeeping_state(
    type: Optional[str] = None,
    store: DashboardStore = Depends(get_dashboard_store),
):
    if not type:
        return error_response(400, "Missing type")
    document = await store.load_state(HOUSEKEEPING_NAMESPACE, type)
    if not document:
        return {"data": None, "timestamp": None}
    return {"data": document.get("data"), "timestamp": document.get("timestamp")}


@router.get("/room-config", summary="Total sellable rooms")
async def get_room_config(store: DashboardStore = Depends(get_dashboard_store)) -> dict[str, Any]:
    default = settings.property.default_total_rooms
    document = await store.load_state(CONFIG_NAMESPACE, TOTAL_ROOMS)
    if not document:
        return {"success": True, "totalRooms": default, "source": "default"}

    data = document.get("data") or {}
    return {
        "success": True,
        "totalRooms": data.get("count") or default,
        "lastUpdated": document.get("updatedAt"),
        "updatedBy": data.get("updatedBy"),
        "reason": data.get("reason"),
        "source": "store",
    }


@router.post("/room-config", summary="Change the total sellable rooms")
async def update_room_config(
    payload: dict[str, Any] = Body(...),
    store: DashboardStore = Depends(get_dashboard_store),
):
    total_rooms = payload.get("totalRooms")
    if (
        isinstance(total_rooms, bool)
        or not isinstance(total_rooms, (int, float))
        or not 1 <= total_rooms <= MAX_TOTAL_ROOMS
    ):
        return error_response(400, f"totalRooms must be a number between 1 and {MAX_TOTAL_ROOMS}")

    reason = payload.get("reason") or "Manual update"
    updated_by = payload.get("updatedBy") or "system"
    await store.save_state(
        CONFIG_NAMESPACE,
        TOTAL_ROOMS,
        {"count": total_rooms, "reason": reason, "updatedBy": updated_by},
    )
    logger.info("Room count updated", total_rooms=total_rooms, updated_by=updated_by, reason=reason)
    return {"success": True, "totalRooms": total_rooms}
