"""Lifecycle events raised by directory mutations and their dispatcher.

The directory never calls subscribers itself: mutations return the events
they raised and the registry hands them to an EventDispatcher. Subscribers
are awaited in subscription order as part of the mutating call.
"""

import inspect
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Tuple, Union

from fm_service_directory.models import Service

logger = logging.getLogger(__name__)


class LifecycleEventType(str, Enum):
    """Notifications emitted by the directory."""

    SERVICE_CONNECTED = "service-connected"
    SERVICE_DISCONNECTED = "service-disconnected"


@dataclass(frozen=True)
class ServiceConnected:
    """A previously unknown service was added."""

    name: str

    event_type = LifecycleEventType.SERVICE_CONNECTED

    def handler_args(self) -> Tuple[Any, ...]:
        return (self.name,)


@dataclass(frozen=True)
class ServiceDisconnected:
    """A registered service was removed.

    Carries the removed value because the directory no longer holds it
    by the time subscribers run.
    """

    name: str
    service: Service

    event_type = LifecycleEventType.SERVICE_DISCONNECTED

    def handler_args(self) -> Tuple[Any, ...]:
        return (self.name, self.service)


LifecycleEvent = Union[ServiceConnected, ServiceDisconnected]

# handler(name) for connected, handler(name, last_known_service) for disconnected
EventHandler = Callable[..., Any]


class EventDispatcher:
    """Delivers lifecycle events to subscribers.

    Handlers may be plain callables or coroutine functions. A handler that
    raises is logged and does not stop delivery to the remaining handlers,
    and never undoes the mutation that raised the event.
    """

    def __init__(self):
        self._handlers: Dict[LifecycleEventType, List[EventHandler]] = {
            event_type: [] for event_type in LifecycleEventType
        }

    def subscribe(self, event_type: Union[LifecycleEventType, str], handler: EventHandler) -> None:
        """Register ``handler`` for ``event_type``."""
        self._handlers[LifecycleEventType(event_type)].append(handler)

    def unsubscribe(self, event_type: Union[LifecycleEventType, str], handler: EventHandler) -> bool:
        """Remove ``handler``; returns False if it was not subscribed."""
        handlers = self._handlers[LifecycleEventType(event_type)]
        try:
            handlers.remove(handler)
        except ValueError:
            return False
        return True

    async def dispatch(self, events: List[LifecycleEvent]) -> None:
        """Deliver ``events`` in order, awaiting every handler."""
        for event in events:
            # Copy so handlers may unsubscribe themselves while running
            for handler in list(self._handlers[event.event_type]):
                try:
                    result = handler(*event.handler_args())
                    if inspect.isawaitable(result):
                        await result
                except Exception:
                    logger.exception(
                        f"Handler {getattr(handler, '__qualname__', handler)!r} failed "
                        f"for {event.event_type.value}({event.name})"
                    )
