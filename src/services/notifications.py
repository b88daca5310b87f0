"""Webhook intake, notification audit log and live event fan-out."""

import asyncio
import json
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from structlog import get_logger

from src.clients.redis_store import DashboardStore, StoreError
from src.config import settings

logger = get_logger(__name__)

BOOKING_UPDATE = "booking_update"


def format_sse(event: str, payload: Any) -> str:
    """Render one Server-Sent Events frame."""
    return f"event: {event}\ndata: {json.dumps(payload, default=str)}\n\n"


class EventPublisher:
    """One-directional fan-out of events to live stream subscribers.

    Each subscriber owns a bounded queue. Publishing never waits: a
    subscriber whose queue is full is dropped and has to reconnect.
    """

    def __init__(self, queue_size: Optional[int] = None):
        self.queue_size = queue_size or settings.stream.queue_size
        self._subscribers: set[asyncio.Queue] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.queue_size)
        self._subscribers.add(queue)
        logger.info("Stream subscriber connected", subscribers=self.subscriber_count)
        return queue

    def is_subscribed(self, queue: asyncio.Queue) -> bool:
        return queue in self._subscribers

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        if queue in self._subscribers:
            self._subscribers.discard(queue)
            logger.info("Stream subscriber disconnected", subscribers=self.subscriber_count)

    def publish(self, event: str, payload: dict[str, Any]) -> int:
        """Queue an event for every subscriber.

        Returns:
            Number of subscribers the event was queued for
        """
        delivered = 0
        for queue in list(self._subscribers):
            try:
                queue.put_nowait((event, payload))
                delivered += 1
            except asyncio.QueueFull:
                self._subscribers.discard(queue)
                logger.warning("Dropped slow stream subscriber", event_name=event)
        logger.debug("Published event", event_name=event, delivered=delivered)
        return delivered


@dataclass
class WebhookEvent:
    """Booking change extracted from a provider webhook."""

    action: str
    booking: Optional[dict[str, Any]]
    booking_id: Any = None
    property_id: Any = None
    room_id: Any = None

    @property
    def guest_name(self) -> str:
        if not self.booking:
            return "Unknown"
        name = f"{self.booking.get('firstName') or ''} {self.booking.get('lastName') or ''}".strip()
        return name or "Unknown"

    def _booking_field(self, name: str) -> Any:
        return self.booking.get(name) if self.booking else None

    def audit_row(self) -> dict[str, Any]:
        return {
            "type": BOOKING_UPDATE,
            "action": self.action,
            "bookingId": self.booking_id,
            "propertyId": self.property_id,
            "guestName": self.guest_name,
            "roomId": self.room_id,
            "arrival": self._booking_field("arrival"),
            "departure": self._booking_field("departure"),
            "status": self._booking_field("status"),
        }

    def stream_payload(self, now: Optional[datetime] = None) -> dict[str, Any]:
        now = now or datetime.now(timezone.utc)
        return {
            "action": self.action,
            "bookingId": self.booking_id,
            "guestName": self.guest_name,
            "roomId": self.room_id,
            "arrival": self._booking_field("arrival"),
            "departure": self._booking_field("departure"),
            "status": self._booking_field("status"),
            "timestamp": now.isoformat(),
            "message": f"Booking {self.action}: {self.guest_name}",
        }


def classify_webhook(payload: dict[str, Any], property_id: Optional[int] = None) -> WebhookEvent:
    """Work out which booking changed and how.

    Three payload shapes are accepted:
    - {"booking": {...}}: cancelled if cancelTime is set, new_booking when
      bookingTime equals modifiedTime, modified otherwise
    - a flat booking with id and roomId: cancelled if cancelTime is set,
      else its own action field, else modified
    - {"action": ...} without booking data
    """
    booking = None
    action = "unknown"

    nested = payload.get("booking")
    if isinstance(nested, dict) and nested:
        booking = nested
        if booking.get("cancelTime"):
            action = "cancelled"
        elif booking.get("bookingTime") == booking.get("modifiedTime"):
            action = "new_booking"
        else:
            action = "modified"
    elif payload.get("id") and payload.get("roomId"):
        booking = payload
        action = "cancelled" if payload.get("cancelTime") else payload.get("action") or "modified"
    elif payload.get("action"):
        action = payload["action"]

    booking_data = booking or {}
    return WebhookEvent(
        action=action,
        booking=booking,
        booking_id=booking_data.get("id") or payload.get("bookingId"),
        property_id=(
            booking_data.get("propertyId")
            or payload.get("propId")
            or property_id
            or settings.property.property_id
        ),
        room_id=booking_data.get("roomId") or payload.get("roomId"),
    )


class NotificationService:
    """Records provider webhooks and relays them to live subscribers."""

    def __init__(
        self,
        store: DashboardStore,
        publisher: EventPublisher,
        retention_days: Optional[int] = None,
    ):
        self.store = store
        self.publisher = publisher
        self.retention = timedelta(days=retention_days or settings.notification_retention_days)

    async def handle_webhook(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Classify, store and broadcast one webhook.

        Returns:
            Result with the stored notification id and the delivery count

        Raises:
            StoreError: If the audit row cannot be stored
        """
        event = classify_webhook(payload)
        notification_id = await self.store.add_notification(event.audit_row())
        logger.info(
            "Webhook notification stored",
            notification_id=notification_id,
            action=event.action,
            booking_id=event.booking_id,
        )

        delivered = 0
        if self.publisher.subscriber_count:
            delivered = self.publisher.publish(BOOKING_UPDATE, event.stream_payload())

        return {
            "notificationId": notification_id,
            "action": event.action,
            "sseClientsNotified": delivered,
        }

    async def cleanup(self, now: Optional[datetime] = None) -> int:
        """Delete one batch of audit rows older than the retention window.

        Failures are logged and reported as zero deletions.
        """
        now = now or datetime.now(timezone.utc)
        try:
            return await self.store.cleanup_notifications(now - self.retention)
        except StoreError as e:
            logger.error("Notification cleanup failed", error=str(e))
            return 0

    async def list_notifications(
        self,
        limit: int = 50,
        since: Optional[datetime] = None,
    ) -> list[dict[str, Any]]:
        return await self.store.list_notifications(limit=limit, since=since)

    async def delete_notification(self, notification_id: str) -> None:
        await self.store.delete_notification(notification_id)
