"""Provider webhook intake and the notification audit log."""

import time
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request
from structlog import get_logger

from src.api.dependencies import get_notification_service
from src.api.responses import elapsed_ms, error_response
from src.clients.redis_store import StoreError
from src.services.notifications import NotificationService

logger = get_logger(__name__)

router = APIRouter()


@router.post("/webhook/booking", summary="Receive a booking change from the provider")
async def receive_booking_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    service: NotificationService = Depends(get_notification_service),
) -> dict[str, Any]:
    """Always answers 200 so the provider does not retry the delivery."""
    started = time.perf_counter()
    try:
        payload = await request.json()
        if not isinstance(payload, dict):
            raise ValueError("Webhook payload must be a JSON object")
        result = await service.handle_webhook(payload)
    except (ValueError, StoreError) as e:
        logger.error("Webhook processing failed", error=str(e))
        return {"success": False, "error": str(e)}

    background_tasks.add_task(service.cleanup)
    return {"success": True, **result, "processTime": elapsed_ms(started)}


@router.get("/notifications", summary="Stored webhook notifications, newest first")
async def list_notifications(
    limit: Optional[str] = None,
    since: Optional[str] = Query(None, description="ISO timestamp"),
    service: NotificationService = Depends(get_notification_service),
):
    try:
        row_limit = int(limit) if limit else 50
    except ValueError:
        row_limit = 50
    row_limit = row_limit if row_limit > 0 else 50

    since_at = None
    if since:
        try:
            since_at = datetime.fromisoformat(since.replace("Z", "+00:00"))
        except ValueError:
            return error_response(400, f"Invalid since timestamp: {since!r}")
        if since_at.tzinfo is None:
            since_at = since_at.replace(tzinfo=timezone.utc)

    notifications = await service.list_notifications(limit=row_limit, since=since_at)
    return {"success": True, "count": len(notifications), "notifications": notifications}


@router.delete("/notifications/{notification_id}", summary="Delete one notification")
async def delete_notification(
    notification_id: str,
    service: NotificationService = Depends(get_notification_service),
) -> dict[str, Any]:
    await service.delete_notification(notification_id)
    return {"success": True}
