"""Mirroring of registry state into the durable store.

Each service ``N`` is stored as two JSON records:
- ``<prefix>_N_hosts``: array of host strings
- ``<prefix>_N_endpoints``: object with public/protected/internal arrays

The registry is the source of truth at runtime. The records only exist to
survive restarts, so the two phases fail differently:
- startup rehydration is strict: store errors and corrupt records propagate
- live write-through is best effort: store errors are logged, the in-memory
  mutation stands, and the next rehydration reconciles
"""

import json
import logging
from typing import Any, List, Optional, Tuple

from pydantic import TypeAdapter, ValidationError
from redis.exceptions import RedisError

from fm_service_directory.discovery import LifecycleEventType, ServiceRegistry
from fm_service_directory.exceptions import CorruptRecordError
from fm_service_directory.infrastructure.store import KeyValueStore
from fm_service_directory.models import EndpointSet, Service

logger = logging.getLogger(__name__)

HOSTS_SUFFIX = "hosts"
ENDPOINTS_SUFFIX = "endpoints"

_hosts_adapter = TypeAdapter(List[str])

# Errors a live store call may raise; anything else is a bug and propagates
# to the dispatcher, which logs it.
STORE_ERRORS = (RedisError, OSError)


def serialize_hosts(service: Service) -> str:
    return json.dumps(list(service.hosts))


def serialize_endpoints(service: Service) -> str:
    return json.dumps(service.endpoints.model_dump(mode="json"))


def decode_record(key: str, raw: Optional[str]) -> Tuple[Any, bool]:
    """Decode a stored JSON value.

    A value that decodes to a JSON string is decoded a second time, which
    covers records written double-encoded by older writers.

    Returns:
        (decoded value, whether the record was double-encoded)

    Raises:
        CorruptRecordError: If the record is missing or not valid JSON
    """
    if raw is None:
        raise CorruptRecordError(key, "record missing")
    try:
        value = json.loads(raw)
        if isinstance(value, str):
            return json.loads(value), True
    except json.JSONDecodeError as e:
        raise CorruptRecordError(key, f"invalid JSON: {e}") from e
    return value, False


class PersistenceSynchronizer:
    """Rehydrates a registry from the store and keeps the store current.

    Example:
        ```python
        sync = PersistenceSynchronizer(registry, RedisKeyValueStore(client))
        await sync.start()   # rehydrate, probe, then subscribe
        ...
        sync.stop()
        ```
    """

    def __init__(
        self,
        registry: ServiceRegistry,
        store: KeyValueStore,
        key_prefix: str = "registry",
        strict_heartbeat: bool = True,
    ):
        """Initialize synchronizer.

        Args:
            registry: Registry to rehydrate and mirror
            store: Durable key-value store
            key_prefix: Prefix of persisted keys (default: "registry")
            strict_heartbeat: Abort rehydration when a probe fails
        """
        self.registry = registry
        self.store = store
        self.key_prefix = key_prefix
        self.strict_heartbeat = strict_heartbeat
        self._subscribed = False

    def hosts_key(self, name: str) -> str:
        return f"{self.key_prefix}_{name}_{HOSTS_SUFFIX}"

    def endpoints_key(self, name: str) -> str:
        return f"{self.key_prefix}_{name}_{ENDPOINTS_SUFFIX}"

    def _name_from_hosts_key(self, key: str) -> str:
        name = key[len(self.key_prefix) + 1 : -(len(HOSTS_SUFFIX) + 1)]
        if not name:
            raise CorruptRecordError(key, "empty service name")
        return name

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> List[str]:
        """Rehydrate the registry, then subscribe to lifecycle notifications.

        Returns:
            Names of the rehydrated services
        """
        names = await self.rehydrate()
        if not self._subscribed:
            self.registry.on(LifecycleEventType.SERVICE_CONNECTED, self._on_connected)
            self.registry.on(LifecycleEventType.SERVICE_DISCONNECTED, self._on_disconnected)
            self._subscribed = True
        return names

    def stop(self) -> None:
        """Unsubscribe from lifecycle notifications."""
        if not self._subscribed:
            return
        self.registry.off(LifecycleEventType.SERVICE_CONNECTED, self._on_connected)
        self.registry.off(LifecycleEventType.SERVICE_DISCONNECTED, self._on_disconnected)
        self._subscribed = False

    # ------------------------------------------------------------------
    # Startup rehydration
    # ------------------------------------------------------------------

    async def rehydrate(self) -> List[str]:
        """Load every persisted service into the registry and probe it.

        Raises:
            CorruptRecordError: If a record is missing or malformed
            redis.exceptions.RedisError: If the store is unreachable
            HeartbeatError: If a probe fails while strict_heartbeat is set
        """
        pattern = f"{self.key_prefix}_*_{HOSTS_SUFFIX}"
        keys = sorted(await self.store.scan(pattern))
        logger.info(f"Rehydrating {len(keys)} services from store")

        names = []
        for key in keys:
            name = self._name_from_hosts_key(key)
            hosts, endpoints, double_encoded = await self._load(name)

            await self.registry.add_service(name, hosts, endpoints)
            if double_encoded:
                await self._write(name)
                logger.info(f"Normalized double-encoded records for {name}")

            if hosts:
                await self.registry.heartbeat(name, raise_on_failure=self.strict_heartbeat)
            else:
                logger.warning(f"Rehydrated service {name} has no hosts, skipping heartbeat")
            names.append(name)

        return names

    async def _load(self, name: str) -> Tuple[List[str], EndpointSet, bool]:
        hosts_key = self.hosts_key(name)
        endpoints_key = self.endpoints_key(name)

        raw_hosts, hosts_double = decode_record(hosts_key, await self.store.get(hosts_key))
        raw_endpoints, endpoints_double = decode_record(
            endpoints_key, await self.store.get(endpoints_key)
        )

        try:
            hosts = _hosts_adapter.validate_python(raw_hosts)
        except ValidationError as e:
            raise CorruptRecordError(hosts_key, f"expected an array of host strings: {e}") from e
        try:
            endpoints = EndpointSet.model_validate(raw_endpoints)
        except ValidationError as e:
            raise CorruptRecordError(endpoints_key, f"invalid endpoint set: {e}") from e

        return hosts, endpoints, hosts_double or endpoints_double

    # ------------------------------------------------------------------
    # Live write-through
    # ------------------------------------------------------------------

    async def _write(self, name: str) -> None:
        service = self.registry.service(name)
        if service is None:
            logger.warning(f"Service {name} vanished before it could be persisted")
            return
        await self.store.set(self.endpoints_key(name), serialize_endpoints(service))
        await self.store.set(self.hosts_key(name), serialize_hosts(service))

    async def _on_connected(self, name: str) -> None:
        try:
            await self._write(name)
        except STORE_ERRORS as e:
            logger.error(f"Failed to persist service {name}, store is stale until restart: {e}")
            return
        logger.info(f"Connected to {name}")

    async def _on_disconnected(self, name: str, service: Service) -> None:
        try:
            await self.store.delete(self.endpoints_key(name))
            await self.store.delete(self.hosts_key(name))
        except STORE_ERRORS as e:
            logger.error(
                f"Failed to delete records of service {name} "
                f"(hosts {list(service.hosts)}), store is stale until restart: {e}"
            )
            return
        logger.info(f"Disconnected from {name}")
