"""Endpoint classification for routing and auth decisions.

Pure functions over (Service, route). An unknown route is a normal outcome:
every query returns False (or None for ``classify``) rather than raising.
Internal endpoints are not part of the externally reachable surface, so
``endpoint_exists`` only looks at public and protected endpoints.
"""

from typing import Iterable, Optional

from fm_service_directory.models import Endpoint, EndpointVisibility, Service

# Order in which classify() resolves overlapping groups
CLASSIFICATION_ORDER = (
    EndpointVisibility.INTERNAL,
    EndpointVisibility.PROTECTED,
    EndpointVisibility.PUBLIC,
)


def contains(endpoint: Endpoint, route: str) -> bool:
    """Return True if ``route`` is matched by ``endpoint``'s pattern."""
    return endpoint.contains(route)


def _any_contains(endpoints: Iterable[Endpoint], route: str) -> bool:
    for endpoint in endpoints:
        if endpoint.contains(route):
            return True
    return False


def endpoint_exists(service: Service, route: str) -> bool:
    """Return True if ``route`` matches a public or protected endpoint."""
    return _any_contains(service.endpoints.public, route) or _any_contains(
        service.endpoints.protected, route
    )


def endpoint_protected(service: Service, route: str) -> bool:
    """Return True if ``route`` matches a protected endpoint."""
    return _any_contains(service.endpoints.protected, route)


def endpoint_internal(service: Service, route: str) -> bool:
    """Return True if ``route`` matches an internal endpoint."""
    return _any_contains(service.endpoints.internal, route)


def classify(service: Service, route: str) -> Optional[EndpointVisibility]:
    """Return the visibility class of ``route`` or None for an unknown route.

    When groups overlap the most restrictive class wins
    (internal, then protected, then public).

    Example:
        >>> classify(orders, "/orders/admin")
        <EndpointVisibility.INTERNAL: 'internal'>
    """
    for visibility in CLASSIFICATION_ORDER:
        if _any_contains(service.endpoints.for_visibility(visibility), route):
            return visibility
    return None
