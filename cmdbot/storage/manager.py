import asyncio
import logging
import weakref
from collections.abc import AsyncGenerator, Awaitable
from contextlib import asynccontextmanager
from typing import Any, TypeVar

import redis.asyncio as redis
from redis.exceptions import RedisError

from config.settings import settings

from ..exceptions import StorageUnavailable

T = TypeVar("T")

logger = logging.getLogger(__name__)


class StorageManager:
    """Hash-per-guild key/value store backed by Redis.

    One client (and its connection pool) is shared by every registry call for
    the lifetime of the process. Read-modify-write sequences are serialized per
    ``(namespace, field)`` through :meth:`lock`.
    """

    def __init__(
        self,
        redis_url: str | None = None,
        *,
        key_prefix: str | None = None,
        timeout: float | None = None,
        client: Any = None,
    ) -> None:
        self.redis_url = redis_url or settings.redis_url
        self.key_prefix = settings.redis_key_prefix if key_prefix is None else key_prefix
        self.timeout = timeout or settings.storage_timeout
        self.client = client
        self._locks: weakref.WeakValueDictionary[tuple[str, str], asyncio.Lock] = weakref.WeakValueDictionary()

    async def connect(self) -> None:
        """Create the Redis client and verify the server answers."""
        await self._call(self._ensure_client().ping())
        logger.info("Connected to Redis command store")

    async def close(self) -> None:
        if self.client is not None:
            await self.client.aclose()
            self.client = None
            logger.info("Redis connection closed")

    async def health_check(self) -> bool:
        try:
            await self._call(self._ensure_client().ping())
            return True
        except StorageUnavailable as e:
            logger.error(f"Storage health check failed: {e}")
            return False

    def namespace_key(self, namespace: str) -> str:
        return f"{self.key_prefix}{namespace}"

    @asynccontextmanager
    async def lock(self, namespace: str, field: str) -> AsyncGenerator[None, None]:
        """Hold exclusive access to one field of one namespace."""
        key = (namespace, field)
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock

        async with lock:
            yield

    async def hget(self, namespace: str, field: str) -> bytes | None:
        return await self._call(self._require_client().hget(self.namespace_key(namespace), field))

    async def hset(self, namespace: str, field: str, value: str | bytes) -> None:
        await self._call(self._require_client().hset(self.namespace_key(namespace), field, value))

    async def hgetall(self, namespace: str) -> dict[str, bytes]:
        """Return every field of ``namespace``; values stay undecoded."""
        result = await self._call(self._require_client().hgetall(self.namespace_key(namespace)))
        return {self._decode_field(field): value for field, value in (result or {}).items()}

    async def hdel(self, namespace: str, field: str) -> bool:
        removed = await self._call(self._require_client().hdel(self.namespace_key(namespace), field))
        return bool(removed)

    @staticmethod
    def _decode_field(field: str | bytes) -> str:
        if isinstance(field, bytes):
            return field.decode("utf-8", errors="replace")
        return field

    def _ensure_client(self) -> Any:
        if self.client is None:
            # Values are read as bytes so undecodable entries reach the record parser
            self.client = redis.from_url(
                self.redis_url,
                decode_responses=False,
                socket_timeout=self.timeout,
                socket_connect_timeout=self.timeout,
            )
        return self.client

    def _require_client(self) -> Any:
        if self.client is None:
            raise StorageUnavailable("Storage client not connected")
        return self.client

    async def _call(self, awaitable: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise StorageUnavailable(f"Storage call timed out after {self.timeout}s") from e
        except (RedisError, OSError) as e:
            raise StorageUnavailable(f"Storage error: {e}") from e
