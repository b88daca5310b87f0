"""FastAPI application factory."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from structlog import get_logger

from src.api import get_api_router
from src.api.responses import error_response
from src.clients import Beds24Client, Beds24ClientError, ClientContext, DashboardStore, StoreError
from src.config import settings
from src.services import BookingValidationError, BookingViewService, EventPublisher, NotificationService

logger = get_logger(__name__)


async def handle_validation_error(request: Request, exc: BookingValidationError) -> JSONResponse:
    logger.warning("Rejected request", path=request.url.path, error=str(exc))
    return error_response(400, str(exc))


async def handle_upstream_error(request: Request, exc: Beds24ClientError) -> JSONResponse:
    logger.error(
        "Upstream failure",
        path=request.url.path,
        error_type=type(exc).__name__,
        error=str(exc),
    )
    return error_response(500, str(exc))


async def handle_store_error(request: Request, exc: StoreError) -> JSONResponse:
    logger.error("Store failure", path=request.url.path, error=str(exc))
    return error_response(500, str(exc))


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error", path=request.url.path, error=str(exc), exc_info=exc)
    return error_response(500, str(exc) or type(exc).__name__)


def create_app() -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        missing = settings.validate_credentials()
        if missing:
            logger.warning("Beds24 credentials incomplete", missing=missing)

        beds24_client = Beds24Client(ClientContext())
        dashboard_store = DashboardStore()
        event_publisher = EventPublisher()

        app.state.beds24_client = beds24_client
        app.state.dashboard_store = dashboard_store
        app.state.event_publisher = event_publisher
        app.state.view_service = BookingViewService(beds24_client)
        app.state.notification_service = NotificationService(dashboard_store, event_publisher)

        logger.info(
            "Bookings hub started",
            environment=settings.environment,
            property_id=settings.property.property_id,
            timezone=settings.property.timezone,
        )

        yield

        await dashboard_store.close()
        logger.info("Bookings hub stopped")

    app = FastAPI(
        title="Bookings Hub",
        version="1.0.0",
        description="Live booking views for one Beds24 property.",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(BookingValidationError, handle_validation_error)
    app.add_exception_handler(Beds24ClientError, handle_upstream_error)
    app.add_exception_handler(StoreError, handle_store_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.include_router(get_api_router())

    return app
