"""Registry startup and shutdown.

There is no process-wide registry: ``init_registry`` returns a handle that
callers pass to whatever needs the directory, and isolated handles can run
side by side (e.g. in tests).
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fm_service_directory.clients import HealthCheckClient
from fm_service_directory.config import RegistryConfig
from fm_service_directory.discovery import HealthProber, ServiceRegistry
from fm_service_directory.infrastructure import (
    KeyValueStore,
    PersistenceSynchronizer,
    RedisKeyValueStore,
    get_redis_client,
)

logger = logging.getLogger(__name__)


@dataclass
class RegistryHandle:
    """A running registry and the collaborators it was started with.

    Usage:
        ```python
        async with await init_registry(RegistryConfig.from_env()) as handle:
            service = handle.registry.service("orders")
        ```
    """

    registry: ServiceRegistry
    store: KeyValueStore
    synchronizer: PersistenceSynchronizer
    config: RegistryConfig
    owns_store: bool = False
    closed: bool = False

    async def __aenter__(self) -> "RegistryHandle":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await shutdown_registry(self)


async def init_registry(
    config: Optional[RegistryConfig] = None,
    store: Optional[KeyValueStore] = None,
    prober: Optional[HealthProber] = None,
) -> RegistryHandle:
    """Start a registry: connect the store, rehydrate, then mirror mutations.

    Args:
        config: Registry settings (default: RegistryConfig.from_env())
        store: Durable store; when omitted a Redis client is created and
            owned by the handle
        prober: Health prober (default: HTTP prober built from config)

    Returns:
        Handle for the running registry

    Raises:
        redis.exceptions.RedisError: If the store cannot be reached
        CorruptRecordError: If a persisted record is missing or malformed
        HeartbeatError: If a rehydrated service fails its probe while
            strict_startup_heartbeat is enabled
    """
    config = config or RegistryConfig.from_env()

    owns_store = store is None
    if store is None:
        store = RedisKeyValueStore(await get_redis_client(url=config.redis_url))

    prober = prober or HealthProber(
        HealthCheckClient(
            path=config.heartbeat_path,
            timeout=config.heartbeat_timeout,
            scheme=config.heartbeat_scheme,
        )
    )
    registry = ServiceRegistry(prober=prober)
    synchronizer = PersistenceSynchronizer(
        registry,
        store,
        key_prefix=config.key_prefix,
        strict_heartbeat=config.strict_startup_heartbeat,
    )

    try:
        names = await synchronizer.start()
    except Exception:
        if owns_store:
            await store.close()
        raise

    logger.info(
        f"ServiceRegistry initialized: prefix={config.key_prefix}, "
        f"services={len(names)}"
    )
    return RegistryHandle(
        registry=registry,
        store=store,
        synchronizer=synchronizer,
        config=config,
        owns_store=owns_store,
    )


async def shutdown_registry(handle: RegistryHandle) -> None:
    """Stop mirroring and release the store if the handle created it.

    Safe to call more than once.
    """
    if handle.closed:
        return
    handle.synchronizer.stop()
    if handle.owns_store:
        await handle.store.close()
    handle.closed = True
    logger.info("ServiceRegistry shut down")
