"""Redis connection management."""

from redis.asyncio import Redis
from redis.exceptions import RedisError

from ..config import config
from .store import ArrayStore


class RedisManager:
    """Manages the async Redis client and the array store built on it."""

    def __init__(self) -> None:
        self._client: Redis | None = None
        self._store: ArrayStore | None = None

    async def initialize(self) -> None:
        """Create the Redis client and store."""
        if self._client is not None:
            return

        self._client = Redis.from_url(
            config.redis.url,
            decode_responses=True,
            socket_timeout=config.redis.socket_timeout,
        )
        self._store = ArrayStore(self._client)

    async def close(self) -> None:
        """Close the Redis client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            self._store = None

    @property
    def store(self) -> ArrayStore:
        if self._store is None:
            raise RuntimeError("Redis not initialized. Call initialize() first.")
        return self._store

    async def health_check(self) -> bool:
        """Check if the Redis connection is healthy."""
        if self._client is None:
            return False

        try:
            return bool(await self._client.ping())
        except RedisError:
            return False


# Global Redis manager instance
redis_manager = RedisManager()
