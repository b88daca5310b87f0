"""Business services package."""

from src.services.booking_views import (
    BookingValidationError,
    BookingViewService,
    RevenueTotals,
)
from src.services.merge import exclude_cancelled, merge_bookings
from src.services.notifications import (
    EventPublisher,
    NotificationService,
    WebhookEvent,
    classify_webhook,
    format_sse,
)
from src.services.pagination import PageWalkResult, PaginationWalker

__all__ = [
    "BookingViewService",
    "BookingValidationError",
    "RevenueTotals",
    "merge_bookings",
    "exclude_cancelled",
    "PaginationWalker",
    "PageWalkResult",
    "EventPublisher",
    "NotificationService",
    "WebhookEvent",
    "classify_webhook",
    "format_sse",
]
