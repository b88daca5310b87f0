"""Beds24 API v2 client for booking data."""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx
from structlog import get_logger

from src.clients.context import ClientContext, RateLimitSnapshot
from src.clients.token_manager import TokenManagerError, WriteTokenManager
from src.config import settings
from src.models.query import serialize_params

logger = get_logger(__name__)


class Beds24ClientError(Exception):
    """Base exception for Beds24 client errors."""

    pass


class UpstreamUnreachable(Beds24ClientError):
    """Raised when the provider cannot be reached or does not answer in time."""

    pass


class UpstreamRequestFailed(Beds24ClientError):
    """Raised when the provider answers with an explicit failure."""

    def __init__(self, message: str, status_code: Optional[int] = None, payload: Any = None):
        self.message = message
        self.status_code = status_code
        self.payload = payload
        super().__init__(message)


@dataclass
class PageInfo:
    """Pagination metadata of one response."""

    next_page_exists: bool = False
    next_page_link: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "PageInfo":
        pages = payload.get("pages") if isinstance(payload, dict) else None
        if not isinstance(pages, dict):
            return cls()
        return cls(
            next_page_exists=pages.get("nextPageExists") is True,
            next_page_link=pages.get("nextPageLink"),
        )


@dataclass
class UpstreamResponse:
    """Decoded provider response with records normalized to a list."""

    records: list[dict[str, Any]] = field(default_factory=list)
    pages: PageInfo = field(default_factory=PageInfo)
    rate_limit: Optional[RateLimitSnapshot] = None
    status_code: int = 200
    raw: Any = None


def normalize_records(payload: Any) -> list[dict[str, Any]]:
    """Extract the record list from any of the provider's payload shapes.

    Handles a bare list, {"data": [...]}, {"data": {...}} and a bare object.
    """
    if payload is None:
        return []
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        if "data" in payload:
            data = payload["data"]
            if data is None:
                return []
            return data if isinstance(data, list) else [data]
        return [payload]
    return []


class Beds24Client:
    """Client for the Beds24 API v2.

    GET requests authenticate with the permanent read token. Any other method
    authenticates with a short-lived write token obtained from the refresh
    token and cached on the client context.
    """

    def __init__(
        self,
        context: Optional[ClientContext] = None,
        read_token: Optional[str] = None,
        token_manager: Optional[WriteTokenManager] = None,
    ):
        """Initialize the Beds24 client with settings.

        Args:
            context: Client state (rate limit snapshot, token cache).
                A fresh context is created when omitted.
            read_token: Permanent read token, defaults to settings
            token_manager: Write token manager, defaults to one bound to the context
        """
        self.base_url = settings.beds24.base_url.rstrip("/")
        self.timeout = settings.beds24.request_timeout
        self.deadline = settings.beds24.deadline_seconds
        self.context = context or ClientContext()
        self.read_token = read_token if read_token is not None else settings.beds24.read_token
        self.token_manager = token_manager or WriteTokenManager(self.context, base_url=self.base_url)

    @property
    def rate_limit(self) -> RateLimitSnapshot:
        """Last observed rate limit snapshot."""
        return self.context.rate_limit

    async def _get_headers(self, method: str) -> dict[str, str]:
        """Get request headers with the token matching the method.

        Raises:
            UpstreamRequestFailed: If the write token cannot be refreshed
        """
        if method == "GET":
            token = self.read_token
        else:
            try:
                token = await self.token_manager.get_write_token()
            except TokenManagerError as e:
                raise UpstreamRequestFailed(str(e)) from e
        return {
            "token": token,
            "Content-Type": "application/json",
            "User-Agent": "BookingsHub/1.0",
        }

    async def query(
        self,
        resource: str,
        params: Optional[dict[str, Any]] = None,
        method: str = "GET",
        body: Any = None,
    ) -> UpstreamResponse:
        """Issue one request against a provider resource.

        The call is bounded by the configured deadline. It is never retried.

        Args:
            resource: Resource path (e.g. 'bookings', 'properties')
            params: Query parameters, only sent for GET; empty values are dropped
            method: HTTP method
            body: JSON body for non-GET requests

        Returns:
            Normalized response

        Raises:
            UpstreamUnreachable: On transport failure, timeout or deadline breach
            UpstreamRequestFailed: If the provider reports a failure
        """
        method = method.upper()
        try:
            return await asyncio.wait_for(
                self._request(resource, params or {}, method, body),
                timeout=self.deadline,
            )
        except asyncio.TimeoutError as e:
            logger.error(
                "Beds24 request exceeded deadline",
                resource=resource,
                method=method,
                deadline_seconds=self.deadline,
            )
            raise UpstreamUnreachable(
                f"Beds24 {resource} did not answer within {self.deadline}s"
            ) from e

    async def _request(
        self,
        resource: str,
        params: dict[str, Any],
        method: str,
        body: Any,
    ) -> UpstreamResponse:
        url = f"{self.base_url}/{resource.lstrip('/')}"
        headers = await self._get_headers(method)
        query_params = serialize_params(params) if method == "GET" else None
        json_body = body if method != "GET" else None

        logger.debug("Beds24 request", method=method, resource=resource, params=query_params)

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(
                    method=method,
                    url=url,
                    headers=headers,
                    params=query_params,
                    json=json_body,
                )
        except httpx.TimeoutException as e:
            logger.error("Beds24 request timeout", resource=resource, method=method)
            raise UpstreamUnreachable(f"Request timeout for {resource}") from e
        except httpx.RequestError as e:
            logger.error("Beds24 request error", resource=resource, method=method, error=str(e))
            raise UpstreamUnreachable(f"Request failed for {resource}: {e}") from e

        if self.context.record_rate_limit(response.headers):
            logger.debug(
                "Rate limit updated",
                remaining=self.context.rate_limit.remaining,
                request_cost=self.context.rate_limit.request_cost,
            )

        try:
            payload = response.json() if response.content else {}
        except ValueError as e:
            logger.error(
                "Beds24 returned an undecodable body",
                resource=resource,
                status_code=response.status_code,
                response_text=response.text[:200],
            )
            raise UpstreamUnreachable(
                f"Undecodable response from {resource} (HTTP {response.status_code})"
            ) from e

        if isinstance(payload, dict) and (payload.get("success") is False or payload.get("error")):
            message = payload.get("error") or payload.get("message") or "API request failed"
            logger.error(
                "Beds24 request failed",
                resource=resource,
                method=method,
                status_code=response.status_code,
                error=message,
            )
            raise UpstreamRequestFailed(str(message), response.status_code, payload)

        return UpstreamResponse(
            records=normalize_records(payload),
            pages=PageInfo.from_payload(payload),
            rate_limit=self.context.rate_limit,
            status_code=response.status_code,
            raw=payload,
        )

    async def get_bookings(self, params: Optional[dict[str, Any]] = None) -> UpstreamResponse:
        """Fetch one page of bookings."""
        return await self.query("bookings", params)

    async def write_bookings(self, bookings: list[dict[str, Any]]) -> UpstreamResponse:
        """Create or update bookings in one batch."""
        logger.info("Writing bookings", count=len(bookings))
        return await self.query("bookings", method="POST", body=bookings)

    async def get_property(self, property_id: int) -> Optional[dict[str, Any]]:
        """Fetch a property with all its room types and unit details."""
        response = await self.query(
            "properties",
            {"id": property_id, "includeAllRooms": True, "includeUnitDetails": True},
        )
        return response.records[0] if response.records else None
