"""HTTP API package."""

from fastapi import APIRouter

from src.api.routes.bookings import router as bookings_router
from src.api.routes.dashboard import router as dashboard_router
from src.api.routes.proxy import router as proxy_router
from src.api.routes.status import router as status_router
from src.api.routes.stream import router as stream_router
from src.api.routes.views import router as views_router
from src.api.routes.webhooks import router as webhooks_router

__all__ = ["get_api_router"]


def get_api_router() -> APIRouter:
    api_router = APIRouter()
    api_router.include_router(status_router, tags=["status"])
    api_router.include_router(views_router, prefix="/api", tags=["views"])
    api_router.include_router(stream_router, prefix="/api/stream", tags=["stream"])
    api_router.include_router(bookings_router, tags=["bookings"])
    api_router.include_router(webhooks_router, tags=["notifications"])
    api_router.include_router(dashboard_router, tags=["dashboard"])
    api_router.include_router(proxy_router, tags=["proxy"])
    return api_router
