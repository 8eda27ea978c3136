"""Whole-array JSON storage on top of Redis.

Every entity type lives in a single Redis string holding a JSON array. Reads
fetch the entire array and writes replace it. Read-modify-write cycles go
through ``update_array``, which WATCHes the key so a concurrent writer makes
the cycle start over instead of losing its update.
"""

import json
import logging
from typing import Any, Callable, TypeVar

from redis.asyncio import Redis
from redis.exceptions import RedisError, WatchError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ArrayStore:
    """Reads and writes JSON arrays (and a few plain JSON values) by key."""

    def __init__(self, client: Redis) -> None:
        self._client = client

    @staticmethod
    def _decode_array(key: str, raw: str | None) -> list[dict[str, Any]]:
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except ValueError:
            logger.error("Error decoding %s: stored value is not JSON", key)
            return []
        if not isinstance(data, list):
            logger.warning("Value under %s is not an array, ignoring it", key)
            return []
        return data

    async def read_array(self, key: str) -> list[dict[str, Any]]:
        """Return the array stored under ``key``, or ``[]``.

        Missing keys, non-array values, undecodable data and Redis failures
        all read as an empty array; failures are logged, not raised.
        """
        try:
            raw = await self._client.get(key)
        except RedisError:
            logger.exception("Error reading %s", key)
            return []
        return self._decode_array(key, raw)

    async def write_array(self, key: str, items: list[dict[str, Any]]) -> None:
        """Overwrite ``key`` with ``items``. Redis errors propagate."""
        payload = json.dumps(items, ensure_ascii=False)
        try:
            await self._client.set(key, payload)
        except RedisError:
            logger.exception("Error writing %s", key)
            raise

    async def update_array(
        self, key: str, mutate: Callable[[list[dict[str, Any]]], T]
    ) -> T:
        """Apply ``mutate`` to the array in place and write it back atomically.

        ``mutate`` may run more than once when another client writes ``key``
        in between; it must not have side effects outside the list. Redis
        errors propagate.
        """
        try:
            async with self._client.pipeline(transaction=True) as pipe:
                while True:
                    try:
                        await pipe.watch(key)
                        items = self._decode_array(key, await pipe.get(key))
                        result = mutate(items)
                        pipe.multi()
                        pipe.set(key, json.dumps(items, ensure_ascii=False))
                        await pipe.execute()
                        return result
                    except WatchError:
                        logger.debug("Concurrent write to %s, retrying", key)
        except RedisError:
            logger.exception("Error updating %s", key)
            raise

    async def get_json(self, key: str) -> Any | None:
        try:
            raw = await self._client.get(key)
        except RedisError:
            logger.exception("Error reading %s", key)
            return None
        if not raw:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.error("Error decoding %s: stored value is not JSON", key)
            return None

    async def set_json(self, key: str, value: Any, *, ttl_seconds: int | None = None) -> None:
        payload = json.dumps(value, ensure_ascii=False)
        if ttl_seconds:
            await self._client.setex(key, ttl_seconds, payload)
        else:
            await self._client.set(key, payload)

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        return await self._client.delete(*keys)

    async def scan_keys(self, pattern: str = "*") -> list[str]:
        """Return all keys matching ``pattern`` using incremental SCAN."""
        return [key async for key in self._client.scan_iter(match=pattern)]
