"""Request dependencies resolving the services created at startup."""

from fastapi import Request

from src.clients.beds24_client import Beds24Client
from src.clients.redis_store import DashboardStore
from src.services.booking_views import BookingViewService
from src.services.notifications import EventPublisher, NotificationService


def get_beds24_client(request: Request) -> Beds24Client:
    return request.app.state.beds24_client


def get_view_service(request: Request) -> BookingViewService:
    return request.app.state.view_service


def get_dashboard_store(request: Request) -> DashboardStore:
    return request.app.state.dashboard_store


def get_event_publisher(request: Request) -> EventPublisher:
    return request.app.state.event_publisher


def get_notification_service(request: Request) -> NotificationService:
    return request.app.state.notification_service
