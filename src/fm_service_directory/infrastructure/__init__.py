"""Durable store integration: Redis client factory, store adapter, write-through."""

from fm_service_directory.infrastructure.persistence import PersistenceSynchronizer
from fm_service_directory.infrastructure.redis_setup import get_redis_client
from fm_service_directory.infrastructure.store import KeyValueStore, RedisKeyValueStore

__all__ = [
    "PersistenceSynchronizer",
    "KeyValueStore",
    "RedisKeyValueStore",
    "get_redis_client",
]
