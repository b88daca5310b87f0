"""API clients package."""

from src.clients.beds24_client import (
    Beds24Client,
    Beds24ClientError,
    PageInfo,
    UpstreamRequestFailed,
    UpstreamResponse,
    UpstreamUnreachable,
)
from src.clients.context import ClientContext, RateLimitSnapshot
from src.clients.redis_store import DashboardStore, StoreError
from src.clients.token_manager import TokenManagerError, WriteTokenManager

__all__ = [
    "Beds24Client",
    "Beds24ClientError",
    "UpstreamUnreachable",
    "UpstreamRequestFailed",
    "UpstreamResponse",
    "PageInfo",
    "ClientContext",
    "RateLimitSnapshot",
    "WriteTokenManager",
    "TokenManagerError",
    "DashboardStore",
    "StoreError",
]
