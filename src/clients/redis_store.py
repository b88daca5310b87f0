"""Redis-backed store for dashboard state blobs and notification audit rows."""

import json
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError
from structlog import get_logger

from src.config import settings

logger = get_logger(__name__)


class StoreError(Exception):
    """Raised when a store operation fails."""

    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DashboardStore:
    """Key-value store for opaque JSON payloads.

    Layout:
    - {prefix}:state:{namespace}:{type}  JSON blob with its update time
    - {prefix}:notification:{id}          JSON audit row
    - {prefix}:notifications              sorted set of ids scored by receipt time
    """

    def __init__(self, client: Optional[redis.Redis] = None, key_prefix: Optional[str] = None):
        """Initialize Redis client for dashboard state.

        Args:
            client: Existing Redis client, created from settings when omitted
            key_prefix: Key namespace, defaults to settings
        """
        self.redis_client = client or redis.Redis(
            host=settings.redis.host,
            port=settings.redis.port,
            db=settings.redis.db,
            password=settings.redis.password,
            ssl=settings.redis.ssl,
            decode_responses=True,
            socket_timeout=settings.redis.socket_timeout,
            socket_connect_timeout=settings.redis.socket_connect_timeout,
        )
        self.prefix = key_prefix or settings.redis.key_prefix

    def _state_key(self, namespace: str, doc_type: str) -> str:
        return f"{self.prefix}:state:{namespace}:{doc_type}"

    def _notification_key(self, notification_id: str) -> str:
        return f"{self.prefix}:notification:{notification_id}"

    @property
    def _index_key(self) -> str:
        return f"{self.prefix}:notifications"

    async def save_state(
        self,
        namespace: str,
        doc_type: str,
        data: Any,
        **extra: Any,
    ) -> None:
        """Store a JSON blob, replacing any previous one.

        Args:
            namespace: Blob family (e.g. 'dashboard', 'housekeeping')
            doc_type: Blob name within the family
            data: JSON-serializable payload
            **extra: Additional top-level fields stored next to the payload
        """
        document = {"data": data, **extra, "updatedAt": _utcnow().isoformat()}
        try:
            await self.redis_client.set(self._state_key(namespace, doc_type), json.dumps(document))
        except RedisError as e:
            logger.error("Failed to save state", namespace=namespace, doc_type=doc_type, error=str(e))
            raise StoreError(f"Failed to save {namespace}/{doc_type}: {e}") from e
        logger.debug("Saved state", namespace=namespace, doc_type=doc_type)

    async def load_state(self, namespace: str, doc_type: str) -> Optional[dict[str, Any]]:
        """Load a stored blob document, or None when absent."""
        try:
            raw = await self.redis_client.get(self._state_key(namespace, doc_type))
        except RedisError as e:
            logger.error("Failed to load state", namespace=namespace, doc_type=doc_type, error=str(e))
            raise StoreError(f"Failed to load {namespace}/{doc_type}: {e}") from e
        return json.loads(raw) if raw else None

    async def add_notification(self, row: dict[str, Any], received_at: Optional[datetime] = None) -> str:
        """Append an audit row.

        Returns:
            Generated notification id
        """
        received_at = received_at or _utcnow()
        notification_id = uuid.uuid4().hex
        document = {**row, "receivedAt": received_at.isoformat()}
        try:
            async with self.redis_client.pipeline(transaction=True) as pipe:
                pipe.set(self._notification_key(notification_id), json.dumps(document))
                pipe.zadd(self._index_key, {notification_id: received_at.timestamp()})
                await pipe.execute()
        except RedisError as e:
            logger.error("Failed to store notification", error=str(e))
            raise StoreError(f"Failed to store notification: {e}") from e
        return notification_id

    async def list_notifications(
        self,
        limit: int = 50,
        since: Optional[datetime] = None,
    ) -> list[dict[str, Any]]:
        """List audit rows, newest first.

        Args:
            limit: Maximum number of rows
            since: Only rows received strictly after this instant
        """
        min_score = f"({since.timestamp()}" if since else "-inf"
        try:
            ids = await self.redis_client.zrevrangebyscore(
                self._index_key, "+inf", min_score, start=0, num=limit
            )
            if not ids:
                return []
            raws = await self.redis_client.mget([self._notification_key(i) for i in ids])
        except RedisError as e:
            logger.error("Failed to list notifications", error=str(e))
            raise StoreError(f"Failed to list notifications: {e}") from e

        return [
            {"id": notification_id, **json.loads(raw)}
            for notification_id, raw in zip(ids, raws)
            if raw
        ]

    async def delete_notification(self, notification_id: str) -> None:
        """Delete one audit row."""
        try:
            async with self.redis_client.pipeline(transaction=True) as pipe:
                pipe.delete(self._notification_key(notification_id))
                pipe.zrem(self._index_key, notification_id)
                await pipe.execute()
        except RedisError as e:
            logger.error("Failed to delete notification", notification_id=notification_id, error=str(e))
            raise StoreError(f"Failed to delete notification {notification_id}: {e}") from e

    async def cleanup_notifications(self, cutoff: datetime, batch_size: int = 100) -> int:
        """Delete at most batch_size rows received before the cutoff.

        Returns:
            Number of rows deleted
        """
        try:
            ids = await self.redis_client.zrangebyscore(
                self._index_key, "-inf", f"({cutoff.timestamp()}", start=0, num=batch_size
            )
            if not ids:
                return 0
            async with self.redis_client.pipeline(transaction=True) as pipe:
                pipe.delete(*[self._notification_key(i) for i in ids])
                pipe.zrem(self._index_key, *ids)
                await pipe.execute()
        except RedisError as e:
            logger.error("Failed to clean up notifications", error=str(e))
            raise StoreError(f"Failed to clean up notifications: {e}") from e

        logger.info("Cleaned old notifications", count=len(ids))
        return len(ids)

    async def close(self) -> None:
        """Close Redis connection."""
        try:
            await self.redis_client.aclose()
            logger.debug("Closed Redis connection")
        except RedisError as e:
            logger.warning("Error closing Redis connection", error=str(e))
