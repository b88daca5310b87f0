"""Write token manager for Beds24 refresh-token authentication."""

import time
from typing import Any, Optional

import httpx
from structlog import get_logger

from src.clients.context import CachedToken, ClientContext
from src.config import settings

logger = get_logger(__name__)


class TokenManagerError(Exception):
    """Raised when the write token cannot be obtained."""

    pass


class WriteTokenManager:
    """Exchanges the long-lived refresh token for short-lived write tokens.

    The token is cached on the client context. Its expiry is stored early by
    the refresh margin, and the cached token is reused only while more than
    the minimum validity remains.
    """

    TOKEN_ENDPOINT = "/authentication/token"

    def __init__(
        self,
        context: ClientContext,
        refresh_token: Optional[str] = None,
        base_url: Optional[str] = None,
    ):
        """Initialize the token manager.

        Args:
            context: Client context holding the token cache
            refresh_token: Refresh token, defaults to settings
            base_url: API base URL, defaults to settings
        """
        self.context = context
        self.refresh_token = refresh_token if refresh_token is not None else settings.beds24.write_refresh_token
        self.base_url = (base_url or settings.beds24.base_url).rstrip("/")
        self.timeout = settings.beds24.request_timeout
        self.refresh_margin = settings.beds24.token_refresh_margin_seconds
        self.min_validity = settings.beds24.token_min_validity_seconds

    async def get_write_token(self) -> str:
        """Get a valid write token, refreshing it when needed.

        Returns:
            Write access token

        Raises:
            TokenManagerError: If the refresh fails
        """
        now = time.time()
        cached = self.context.write_token
        if cached.is_valid(now, self.min_validity):
            logger.debug("Using cached write token")
            return cached.token

        if not self.refresh_token:
            raise TokenManagerError("No write refresh token configured")

        logger.info("Refreshing Beds24 write token")
        try:
            token_data = await self._fetch_new_token()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Write token refresh failed", error=str(e))
            raise TokenManagerError(f"Failed to refresh write token: {e}") from e

        if not isinstance(token_data, dict):
            raise TokenManagerError("Unexpected write token response")

        token = token_data.get("token")
        if not token:
            logger.error("Write token refresh returned no token", response=token_data)
            raise TokenManagerError(
                token_data.get("error") or "Write token refresh returned no token"
            )

        expires_in = int(token_data.get("expiresIn") or 0)
        self.context.write_token = CachedToken(
            token=token,
            expires_at=now + expires_in - self.refresh_margin,
        )
        logger.info("Write token refreshed", expires_in=expires_in)
        return token

    async def _fetch_new_token(self) -> dict[str, Any]:
        """Exchange the refresh token for an access token.

        Returns:
            Token response with 'token' and 'expiresIn'
        """
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(
                f"{self.base_url}{self.TOKEN_ENDPOINT}",
                headers={"refreshToken": self.refresh_token},
            )
            return response.json()

    def invalidate(self) -> None:
        """Drop the cached write token."""
        self.context.write_token = CachedToken()
