"""Endpoint models and route matching rules.

An Endpoint is an immutable route pattern with a containment predicate.
Three matching rules are supported:

- template (default): segment-by-segment match where ``{param}`` or ``:param``
  matches any one non-empty segment and a trailing ``*`` matches the rest
- exact: normalized route equals the pattern
- prefix: the pattern's segments are a leading subset of the route's segments

Routes are normalized before matching: query string and fragment are dropped
and a trailing slash is ignored.
"""

from enum import Enum
from typing import Any, List, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator


class MatchMode(str, Enum):
    """Rule used by an Endpoint to decide containment."""

    TEMPLATE = "template"
    EXACT = "exact"
    PREFIX = "prefix"


class EndpointVisibility(str, Enum):
    """Visibility class of an endpoint, consumed by an external auth layer."""

    PUBLIC = "public"
    PROTECTED = "protected"
    INTERNAL = "internal"


def normalize_route(route: str) -> str:
    """Strip query/fragment and trailing slash, ensure a leading slash.

    Example:
        >>> normalize_route("orders/42/?expand=items")
        '/orders/42'
    """
    path = route.strip()
    for separator in ("?", "#"):
        path = path.split(separator, 1)[0]
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1:
        path = path.rstrip("/") or "/"
    return path


def _segments(path: str) -> List[str]:
    if path == "/":
        return []
    return path[1:].split("/")


def _is_placeholder(segment: str) -> bool:
    return (segment.startswith("{") and segment.endswith("}") and len(segment) > 2) or (
        segment.startswith(":") and len(segment) > 1
    )


def _template_match(pattern: List[str], route: List[str]) -> bool:
    last = len(pattern) - 1
    for index, segment in enumerate(pattern):
        if segment == "*" and index == last:
            return len(route) >= index
        if index >= len(route):
            return False
        if _is_placeholder(segment):
            if not route[index]:
                return False
            continue
        if segment != route[index]:
            return False
    return len(pattern) == len(route)


class Endpoint(BaseModel):
    """Immutable route pattern.

    Decoding accepts a bare pattern string as shorthand for a template
    endpoint, so ``"/orders/{id}"`` and ``{"pattern": "/orders/{id}"}`` are
    equivalent.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    pattern: str = Field(..., min_length=1, description="Route pattern, e.g. /orders/{id}")
    match: MatchMode = Field(MatchMode.TEMPLATE, description="Containment rule")

    @model_validator(mode="before")
    @classmethod
    def accept_bare_pattern(cls, data: Any) -> Any:
        """Allow an endpoint to be given as its pattern string."""
        if isinstance(data, str):
            return {"pattern": data}
        return data

    def contains(self, route: str) -> bool:
        """Return True if the concrete ``route`` is matched by this pattern."""
        candidate = normalize_route(route)
        pattern = normalize_route(self.pattern)

        if self.match == MatchMode.EXACT:
            return candidate == pattern

        pattern_segments = _segments(pattern)
        route_segments = _segments(candidate)

        if self.match == MatchMode.PREFIX:
            return route_segments[: len(pattern_segments)] == pattern_segments

        return _template_match(pattern_segments, route_segments)


class EndpointSet(BaseModel):
    """Endpoints of a service grouped by visibility.

    Each group keeps insertion order; matching stops at the first hit.
    Groups are not required to be disjoint.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    public: Tuple[Endpoint, ...] = Field(default_factory=tuple)
    protected: Tuple[Endpoint, ...] = Field(default_factory=tuple)
    internal: Tuple[Endpoint, ...] = Field(default_factory=tuple)

    def for_visibility(self, visibility: EndpointVisibility) -> Tuple[Endpoint, ...]:
        return getattr(self, visibility.value)
