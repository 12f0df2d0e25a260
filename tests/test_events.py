"""Tests for lifecycle event dispatch."""

import logging

import pytest

from fm_service_directory.discovery import (
    EventDispatcher,
    LifecycleEventType,
    ServiceConnected,
    ServiceDisconnected,
)
from fm_service_directory.models import Service


@pytest.fixture
def dispatcher():
    return EventDispatcher()


async def test_sync_and_async_handlers_receive_args(dispatcher):
    calls = []

    def on_connected(name):
        calls.append(("connected", name))

    async def on_disconnected(name, service):
        calls.append(("disconnected", name, service.hosts))

    dispatcher.subscribe("service-connected", on_connected)
    dispatcher.subscribe(LifecycleEventType.SERVICE_DISCONNECTED, on_disconnected)

    removed = Service(name="orders", hosts=("h:1",))
    await dispatcher.dispatch(
        [ServiceConnected(name="orders"), ServiceDisconnected(name="orders", service=removed)]
    )

    assert calls == [("connected", "orders"), ("disconnected", "orders", ("h:1",))]


async def test_handlers_run_in_subscription_order(dispatcher):
    order = []
    dispatcher.subscribe("service-connected", lambda name: order.append(1))
    dispatcher.subscribe("service-connected", lambda name: order.append(2))

    await dispatcher.dispatch([ServiceConnected(name="a")])

    assert order == [1, 2]


async def test_failing_handler_is_logged_and_others_still_run(dispatcher, caplog):
    seen = []

    def broken(name):
        raise RuntimeError("boom")

    dispatcher.subscribe("service-connected", broken)
    dispatcher.subscribe("service-connected", seen.append)

    with caplog.at_level(logging.ERROR):
        await dispatcher.dispatch([ServiceConnected(name="a")])

    assert seen == ["a"]
    assert "service-connected(a)" in caplog.text


async def test_unsubscribe(dispatcher):
    seen = []
    dispatcher.subscribe("service-connected", seen.append)

    assert dispatcher.unsubscribe("service-connected", seen.append)
    assert not dispatcher.unsubscribe("service-connected", seen.append)

    await dispatcher.dispatch([ServiceConnected(name="a")])
    assert seen == []


def test_unknown_event_type_rejected(dispatcher):
    with pytest.raises(ValueError):
        dispatcher.subscribe("service-updated", print)
