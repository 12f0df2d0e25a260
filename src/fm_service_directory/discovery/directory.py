"""In-memory service directory.

The directory is the only owner of registry state. Mutations are synchronous
and return a DirectoryResult listing the lifecycle events they raised; they
do not notify anyone themselves (see ``ServiceRegistry`` for dispatch).
"""

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Union

from fm_service_directory.discovery.events import (
    LifecycleEvent,
    ServiceConnected,
    ServiceDisconnected,
)
from fm_service_directory.exceptions import PreconditionError
from fm_service_directory.models import EndpointSet, Service

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DirectoryResult:
    """Outcome of a directory mutation.

    Attributes:
        service: The resulting entry (add) or the removed entry (remove).
            None means the name was not registered.
        events: Lifecycle events raised, empty for a no-op call.
    """

    service: Optional[Service]
    events: List[LifecycleEvent] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.events)


class ServiceDirectory:
    """Mapping of service name to Service with a host reverse index.

    A host listed by several services belongs to the first one registered;
    the overlap is logged as a data-quality warning.
    """

    def __init__(self):
        self._services: Dict[str, Service] = {}
        self._host_owners: Dict[str, str] = {}

    def add_service(
        self,
        name: str,
        hosts: Iterable[str],
        endpoints: Union[EndpointSet, Mapping],
    ) -> DirectoryResult:
        """Create the entry for ``name`` unless it already exists.

        Re-adding a registered name leaves the existing entry untouched and
        raises no event.

        Raises:
            PreconditionError: If ``hosts`` is a single string instead of a
                sequence of host strings
        """
        if isinstance(hosts, str):
            raise PreconditionError(
                f"Hosts of service {name} must be a sequence of host strings, got {hosts!r}"
            )

        existing = self._services.get(name)
        if existing is not None:
            logger.debug(f"Service {name} already registered, keeping existing entry")
            return DirectoryResult(service=existing)

        service = Service(name=name, hosts=tuple(hosts), endpoints=endpoints)
        self._services[name] = service
        self._index_hosts(service)

        logger.info(f"Registered service: {name} -> hosts {list(service.hosts)}")
        return DirectoryResult(service=service, events=[ServiceConnected(name=name)])

    def remove_service(self, name: str) -> DirectoryResult:
        """Delete the entry for ``name``; ``service`` is None if it was absent."""
        service = self._services.pop(name, None)
        if service is None:
            logger.debug(f"Service {name} not registered, nothing to remove")
            return DirectoryResult(service=None)

        self._unindex_hosts(service)

        logger.info(f"Removed service: {name}")
        return DirectoryResult(
            service=service,
            events=[ServiceDisconnected(name=name, service=service)],
        )

    def service(self, name: str) -> Optional[Service]:
        return self._services.get(name)

    def services(self) -> Mapping[str, Service]:
        """Read-only snapshot of all entries in registration order."""
        return MappingProxyType(dict(self._services))

    def service_name(self, host: str) -> Optional[str]:
        """Return the name of the service that lists ``host``, if any."""
        return self._host_owners.get(host)

    def __contains__(self, name: object) -> bool:
        return name in self._services

    def __len__(self) -> int:
        return len(self._services)

    def _index_hosts(self, service: Service) -> None:
        for host in service.hosts:
            owner = self._host_owners.get(host)
            if owner is None:
                self._host_owners[host] = service.name
            elif owner != service.name:
                logger.warning(
                    f"Host {host} of service {service.name} is already listed by "
                    f"{owner}; lookups resolve to {owner}"
                )

    def _unindex_hosts(self, service: Service) -> None:
        for host in service.hosts:
            if self._host_owners.get(host) != service.name:
                continue
            del self._host_owners[host]
            # Hand the host to the next service (registration order) that lists it
            for other in self._services.values():
                if host in other.hosts:
                    self._host_owners[host] = other.name
                    break
