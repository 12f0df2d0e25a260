"""Service Registry for Request Routing and Endpoint Classification

Public API of the service directory:
- Registration: add/remove services with their hosts and endpoints
- Lookup: by name, by host, or a snapshot of every entry
- Classification: public / protected / internal endpoint checks
- Health: liveness probe of a service's primary host
- Notifications: service-connected / service-disconnected subscriptions
"""

import asyncio
import logging
from typing import Dict, Iterable, Mapping, Optional, Union

from fm_service_directory.discovery import endpoint_matcher
from fm_service_directory.discovery.directory import ServiceDirectory
from fm_service_directory.discovery.events import (
    EventDispatcher,
    EventHandler,
    LifecycleEventType,
)
from fm_service_directory.discovery.health import HealthProber
from fm_service_directory.exceptions import MissingHostError, ServiceNotFoundError
from fm_service_directory.models import EndpointSet, EndpointVisibility, Service

logger = logging.getLogger(__name__)


class ServiceRegistry:
    """Registry of services, their hosts and classified endpoints.

    Mutations are serialized by an ``asyncio.Lock`` that also covers delivery
    of the lifecycle events they raise, so subscribers (such as the store
    write-through) observe mutations of a name in the order they happened.
    Lookups and classification are synchronous and never block.

    Example:
        ```python
        registry = ServiceRegistry()
        registry.on("service-connected", lambda name: print("up", name))

        await registry.add_service(
            "orders",
            ["10.0.0.1:80"],
            {"public": ["/orders"], "internal": ["/orders/admin"]},
        )
        registry.endpoint_internal(registry.service("orders"), "/orders/admin")
        # True
        ```
    """

    def __init__(
        self,
        prober: Optional[HealthProber] = None,
        dispatcher: Optional[EventDispatcher] = None,
    ):
        """Initialize an empty registry.

        Args:
            prober: Health prober used by heartbeat (default: HTTP prober on /hb)
            dispatcher: Event dispatcher (default: a new EventDispatcher)
        """
        self._directory = ServiceDirectory()
        self._dispatcher = dispatcher or EventDispatcher()
        self._lock = asyncio.Lock()
        self.prober = prober or HealthProber()

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def on(self, event_type: Union[LifecycleEventType, str], handler: EventHandler) -> None:
        """Subscribe to a lifecycle notification.

        ``service-connected`` handlers receive ``(name)``;
        ``service-disconnected`` handlers receive ``(name, last_known_service)``.
        Handlers run while the registry lock is held and must not call
        ``add_service`` or ``remove_service``.
        """
        self._dispatcher.subscribe(event_type, handler)

    def off(self, event_type: Union[LifecycleEventType, str], handler: EventHandler) -> bool:
        """Unsubscribe a handler previously passed to ``on``."""
        return self._dispatcher.unsubscribe(event_type, handler)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    async def add_service(
        self,
        name: str,
        hosts: Iterable[str],
        endpoints: Union[EndpointSet, Mapping],
    ) -> Service:
        """Register a service unless the name is already taken.

        Args:
            name: Unique service name
            hosts: "host[:port]" addresses, first is the primary
            endpoints: EndpointSet or mapping with public/protected/internal

        Returns:
            The new entry, or the existing one unchanged if ``name`` was
            already registered (no notification in that case)

        Raises:
            PreconditionError: If ``hosts`` is a single string
        """
        async with self._lock:
            result = self._directory.add_service(name, hosts, endpoints)
            if result.changed:
                await self._dispatcher.dispatch(result.events)
        return result.service

    async def remove_service(self, name: str) -> Optional[Service]:
        """Deregister a service.

        Returns:
            The removed entry, or None if ``name`` was not registered
        """
        async with self._lock:
            result = self._directory.remove_service(name)
            if result.changed:
                await self._dispatcher.dispatch(result.events)
        return result.service

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def service(self, name: str) -> Optional[Service]:
        return self._directory.service(name)

    def services(self) -> Mapping[str, Service]:
        """Read-only snapshot of every registered service."""
        return self._directory.services()

    def service_name(self, host: str) -> Optional[str]:
        """Reverse lookup of the service that lists ``host``."""
        return self._directory.service_name(host)

    def get_url(self, service_name: str, protocol: str = "http") -> str:
        """Get the base URL of a service's primary host.

        Raises:
            ServiceNotFoundError: If the service is not registered
            MissingHostError: If the service has no hosts
        """
        service = self._require(service_name)
        if service.primary_host is None:
            raise MissingHostError(service_name)
        url = f"{protocol}://{service.primary_host}"
        logger.debug(f"Resolved {service_name} -> {url}")
        return url

    def __contains__(self, name: object) -> bool:
        return name in self._directory

    def __len__(self) -> int:
        return len(self._directory)

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    endpoint_exists = staticmethod(endpoint_matcher.endpoint_exists)
    endpoint_protected = staticmethod(endpoint_matcher.endpoint_protected)
    endpoint_internal = staticmethod(endpoint_matcher.endpoint_internal)
    classify = staticmethod(endpoint_matcher.classify)

    def classify_route(self, service_name: str, route: str) -> Optional[EndpointVisibility]:
        """Classify ``route`` against a registered service by name."""
        return endpoint_matcher.classify(self._require(service_name), route)

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    async def heartbeat(self, service_name: str, raise_on_failure: bool = False) -> bool:
        """Probe the primary host of a registered service.

        Raises:
            ServiceNotFoundError: If the service is not registered
            MissingHostError: If the service lists no hosts
            HeartbeatError: If the probe failed and raise_on_failure is set
        """
        return await self.prober.check(self._require(service_name), raise_on_failure)

    async def heartbeat_all(self) -> Dict[str, bool]:
        """Probe every registered service with at least one host."""
        results = {}
        for name, service in self.services().items():
            if service.primary_host is None:
                logger.warning(f"Skipping heartbeat for {name}: no hosts")
                continue
            results[name] = await self.prober.check(service)
        return results

    def _require(self, service_name: str) -> Service:
        service = self._directory.service(service_name)
        if service is None:
            raise ServiceNotFoundError(service_name)
        return service
