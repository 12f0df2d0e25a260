"""Tests for the in-memory ServiceDirectory."""

import logging

import pytest

from fm_service_directory.discovery import (
    ServiceConnected,
    ServiceDirectory,
    ServiceDisconnected,
)
from fm_service_directory.exceptions import PreconditionError
from fm_service_directory.models import EndpointSet, Service


@pytest.fixture
def directory():
    return ServiceDirectory()


class TestAddService:

    def test_add_creates_entry_and_raises_connected(self, directory, orders_endpoints):
        result = directory.add_service("orders", ["10.0.0.1:8080"], orders_endpoints)

        assert result.changed
        assert result.events == [ServiceConnected(name="orders")]
        assert directory.service("orders") == Service(
            name="orders", hosts=("10.0.0.1:8080",), endpoints=orders_endpoints
        )

    def test_readd_is_noop(self, directory, orders_endpoints):
        first = directory.add_service("orders", ["10.0.0.1:8080"], orders_endpoints)
        second = directory.add_service("orders", ["10.9.9.9:8080"], EndpointSet())

        assert second.events == []
        assert second.service is first.service
        assert directory.service("orders").hosts == ("10.0.0.1:8080",)

    def test_accepts_endpoint_mapping(self, directory):
        result = directory.add_service("users", ["u:8080"], {"protected": ["/me"]})
        assert result.service.endpoints.protected[0].pattern == "/me"

    def test_single_host_string_is_rejected(self, directory):
        with pytest.raises(PreconditionError, match="sequence of host strings"):
            directory.add_service("orders", "10.0.0.1:8080", EndpointSet())

        assert "orders" not in directory
        assert directory.service_name("1") is None
        assert directory.service_name("10.0.0.1:8080") is None


class TestRemoveService:

    def test_remove_returns_removed_value(self, directory, orders_endpoints):
        added = directory.add_service("orders", ["10.0.0.1:8080"], orders_endpoints).service

        result = directory.remove_service("orders")

        assert result.service == added
        assert result.events == [ServiceDisconnected(name="orders", service=added)]
        assert directory.service("orders") is None
        assert "orders" not in directory

    def test_remove_unknown_returns_absent(self, directory):
        result = directory.remove_service("ghost")

        assert result.service is None
        assert result.events == []
        assert not result.changed


class TestLookups:

    def test_services_snapshot_is_read_only(self, directory):
        directory.add_service("a", ["a:1"], EndpointSet())
        snapshot = directory.services()

        with pytest.raises(TypeError):
            snapshot["b"] = Service(name="b")

        directory.add_service("b", ["b:1"], EndpointSet())
        assert list(snapshot) == ["a"]
        assert list(directory.services()) == ["a", "b"]

    def test_service_name_reverse_lookup(self, directory):
        directory.add_service("a", ["a:1", "a:2"], EndpointSet())
        directory.add_service("b", ["b:1"], EndpointSet())

        assert directory.service_name("a:2") == "a"
        assert directory.service_name("b:1") == "b"
        assert directory.service_name("c:1") is None

    def test_single_host_service_lookup(self, directory):
        directory.add_service("solo", ["solo:8080"], EndpointSet())
        assert directory.service_name("solo:8080") == "solo"

    def test_shared_host_resolves_to_first_registered(self, directory, caplog):
        directory.add_service("first", ["10.0.0.5:8080"], EndpointSet())
        with caplog.at_level(logging.WARNING):
            directory.add_service("second", ["10.0.0.5:8080"], EndpointSet())

        assert directory.service_name("10.0.0.5:8080") == "first"
        assert "already listed by first" in caplog.text

    def test_shared_host_moves_to_next_owner_on_remove(self, directory):
        directory.add_service("first", ["shared:1"], EndpointSet())
        directory.add_service("second", ["shared:1", "own:1"], EndpointSet())

        directory.remove_service("first")

        assert directory.service_name("shared:1") == "second"
        directory.remove_service("second")
        assert directory.service_name("shared:1") is None
        assert directory.service_name("own:1") is None

    def test_len(self, directory):
        assert len(directory) == 0
        directory.add_service("a", [], EndpointSet())
        assert len(directory) == 1
