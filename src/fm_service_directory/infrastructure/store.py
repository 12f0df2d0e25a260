"""Durable key-value store boundary.

The registry only needs string get/set/delete and glob-style key scans.
``RedisKeyValueStore`` provides them over ``redis.asyncio``.
"""

import logging
from typing import Optional, Protocol, Set, Union, runtime_checkable

from redis.asyncio import Redis

logger = logging.getLogger(__name__)


@runtime_checkable
class KeyValueStore(Protocol):
    """String-keyed, string-valued async store."""

    async def get(self, key: str) -> Optional[str]:
        ...

    async def set(self, key: str, value: str) -> None:
        ...

    async def delete(self, key: str) -> None:
        ...

    async def scan(self, pattern: str) -> Set[str]:
        ...


def _as_str(value: Union[str, bytes]) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


class RedisKeyValueStore:
    """KeyValueStore backed by an async Redis client.

    Works with clients created with or without ``decode_responses``.

    Example:
        ```python
        client = await get_redis_client()
        store = RedisKeyValueStore(client)
        await store.set("registry_orders_hosts", '["10.0.0.1:80"]')
        ```
    """

    def __init__(self, client: Redis, scan_count: int = 100):
        """Initialize store.

        Args:
            client: Connected async Redis client
            scan_count: COUNT hint per SCAN round trip
        """
        self.client = client
        self.scan_count = scan_count

    async def get(self, key: str) -> Optional[str]:
        value = await self.client.get(key)
        return None if value is None else _as_str(value)

    async def set(self, key: str, value: str) -> None:
        await self.client.set(key, value)

    async def delete(self, key: str) -> None:
        await self.client.delete(key)

    async def scan(self, pattern: str) -> Set[str]:
        """Return every key matching ``pattern``, following the cursor to the end."""
        keys = set()
        async for key in self.client.scan_iter(match=pattern, count=self.scan_count):
            keys.add(_as_str(key))
        logger.debug(f"SCAN {pattern} -> {len(keys)} keys")
        return keys

    async def close(self) -> None:
        """Close the underlying client connection pool."""
        await self.client.aclose()
