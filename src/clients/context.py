"""Per-client mutable state: rate limit telemetry and the write token cache."""

import time
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

REMAINING_HEADER = "X-FiveMinCreditLimit-Remaining"
RESETS_IN_HEADER = "X-FiveMinCreditLimit-ResetsIn"
REQUEST_COST_HEADER = "X-RequestCost"


def _to_int(value: Optional[str], default: int) -> int:
    try:
        return int(value) if value not in (None, "") else default
    except ValueError:
        return default


@dataclass
class RateLimitSnapshot:
    """Last observed five-minute credit window. Observational only."""

    remaining: int = 1000
    resets_in: int = 0
    request_cost: int = 0
    last_updated: float = 0.0  # epoch seconds, 0 until the first response

    def as_dict(self) -> dict[str, Any]:
        return {
            "remaining": self.remaining,
            "resetsIn": self.resets_in,
            "requestCost": self.request_cost,
            "lastUpdated": self.last_updated,
        }


@dataclass
class CachedToken:
    """Short-lived write token and its (already shortened) expiry."""

    token: Optional[str] = None
    expires_at: float = 0.0  # epoch seconds

    def is_valid(self, now: float, min_validity: float) -> bool:
        return bool(self.token) and self.expires_at > now + min_validity


@dataclass
class ClientContext:
    """State owned by one Beds24 client instance.

    Overwritten by every response that carries rate limit headers and by
    every write token refresh. Never shared between client instances, so
    tests and separate tenants do not leak into each other.
    """

    rate_limit: RateLimitSnapshot = field(default_factory=RateLimitSnapshot)
    write_token: CachedToken = field(default_factory=CachedToken)

    def record_rate_limit(self, headers: Mapping[str, str], now: Optional[float] = None) -> bool:
        """Update the snapshot from response headers.

        Returns:
            True if the headers carried rate limit data, False otherwise
        """
        remaining = headers.get(REMAINING_HEADER)
        if not remaining:
            return False

        self.rate_limit = RateLimitSnapshot(
            remaining=_to_int(remaining, self.rate_limit.remaining),
            resets_in=_to_int(headers.get(RESETS_IN_HEADER), 0),
            request_cost=_to_int(headers.get(REQUEST_COST_HEADER), 1),
            last_updated=now if now is not None else time.time(),
        )
        return True
