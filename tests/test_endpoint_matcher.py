"""Tests for endpoint classification."""

from fm_service_directory.discovery.endpoint_matcher import (
    classify,
    contains,
    endpoint_exists,
    endpoint_internal,
    endpoint_protected,
)
from fm_service_directory.models import Endpoint, EndpointVisibility, Service


def make_service(public=(), protected=(), internal=()) -> Service:
    return Service(
        name="svc",
        hosts=("10.0.0.1:8080",),
        endpoints={"public": public, "protected": protected, "internal": internal},
    )


def test_contains_delegates_to_endpoint():
    assert contains(Endpoint(pattern="/a/{x}"), "/a/1")
    assert not contains(Endpoint(pattern="/a/{x}"), "/b/1")


def test_orders_scenario(orders_endpoints):
    orders = Service(name="orders", hosts=("10.0.0.1:8080",), endpoints=orders_endpoints)

    assert endpoint_protected(orders, "/orders") is False
    assert endpoint_internal(orders, "/orders/admin") is True
    assert endpoint_exists(orders, "/orders/admin") is False
    assert endpoint_exists(orders, "/orders") is True


def test_exists_covers_public_and_protected():
    service = make_service(public=["/pub"], protected=["/priv"], internal=["/int"])

    assert endpoint_exists(service, "/pub")
    assert endpoint_exists(service, "/priv")
    assert not endpoint_exists(service, "/int")


def test_protected_only_checks_protected():
    service = make_service(public=["/shared"], protected=["/account/{id}"])

    assert endpoint_protected(service, "/account/9")
    assert not endpoint_protected(service, "/shared")


def test_internal_independent_of_other_groups():
    service = make_service(public=["/x"], protected=["/x"], internal=["/x", "/metrics"])

    assert endpoint_internal(service, "/x")
    assert endpoint_internal(service, "/metrics")
    assert not endpoint_internal(make_service(public=["/metrics"]), "/metrics")


def test_unknown_route_is_false_everywhere():
    service = make_service(public=["/a"], protected=["/b"], internal=["/c"])

    assert not endpoint_exists(service, "/nope")
    assert not endpoint_protected(service, "/nope")
    assert not endpoint_internal(service, "/nope")
    assert classify(service, "/nope") is None


def test_classify_prefers_most_restrictive():
    service = make_service(
        public=[{"pattern": "/api", "match": "prefix"}],
        protected=["/api/orders/{id}"],
        internal=["/api/orders/admin"],
    )

    assert classify(service, "/api/health") == EndpointVisibility.PUBLIC
    assert classify(service, "/api/orders/7") == EndpointVisibility.PROTECTED
    assert classify(service, "/api/orders/admin") == EndpointVisibility.INTERNAL
