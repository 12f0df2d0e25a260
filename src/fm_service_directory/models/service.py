"""Service model held by the directory."""

from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from fm_service_directory.models.endpoint import EndpointSet


class Service(BaseModel):
    """A named service with its hosts and classified endpoints.

    Instances are immutable; the directory replaces entries rather than
    editing them, so snapshots handed to callers never change underneath them.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Unique service name (directory key)")
    hosts: Tuple[str, ...] = Field(
        default_factory=tuple, description="host[:port] addresses, first is primary"
    )
    endpoints: EndpointSet = Field(default_factory=EndpointSet)

    @property
    def primary_host(self) -> Optional[str]:
        """Default target for health checks, None when no host is listed."""
        return self.hosts[0] if self.hosts else None
