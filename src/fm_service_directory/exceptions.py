"""Exceptions raised by the service directory.

Store failures are not wrapped: they surface as ``redis.exceptions.RedisError``
so callers can apply their own connection handling.
"""

from typing import Optional


class ServiceDirectoryError(Exception):
    """Base class for all service directory errors."""


class PreconditionError(ServiceDirectoryError):
    """A caller violated an operation's precondition."""


class ServiceNotFoundError(PreconditionError):
    """Operation requires a registered service but the name is unknown."""

    def __init__(self, service_name: str):
        self.service_name = service_name
        super().__init__(f"Service not registered: {service_name}")


class MissingHostError(PreconditionError):
    """Service is registered without any host to probe."""

    def __init__(self, service_name: str):
        self.service_name = service_name
        super().__init__(f"Service {service_name} has no hosts")


class CorruptRecordError(ServiceDirectoryError):
    """A persisted record is missing or cannot be decoded."""

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Corrupt registry record {key}: {reason}")


class HeartbeatError(ServiceDirectoryError):
    """Liveness probe against a service's primary host failed."""

    def __init__(self, service_name: str, url: str, cause: Optional[str] = None):
        self.service_name = service_name
        self.url = url
        message = f"Heartbeat failed for {service_name} at {url}"
        if cause:
            message = f"{message}: {cause}"
        super().__init__(message)
