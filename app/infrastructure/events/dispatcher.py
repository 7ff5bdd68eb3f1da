"""Synchronous, ordered delivery of callback events to registered reactors."""

from __future__ import annotations

import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)

Reactor = Callable[[Any], None]


class CallbackEventDispatcher:
    """Deliver events to reactors in the order they were subscribed.

    A reactor subscribed to a base class also receives its subclasses, so a
    reactor registered for ``PayCallbackEvent`` sees both outcomes. Errors
    raised by a reactor are logged and swallowed; they never reach the
    publisher and never stop later reactors from running.
    """

    def __init__(self) -> None:
        self._subscriptions: list[tuple[type, Reactor]] = []

    def subscribe(self, event_type: type, reactor: Reactor) -> None:
        """Register ``reactor`` for ``event_type`` after every existing reactor."""

        self._subscriptions.append((event_type, reactor))

    def reactors_for(self, event: Any) -> list[Reactor]:
        """Return the reactors that would receive ``event``, in delivery order."""

        return [
            reactor
            for event_type, reactor in self._subscriptions
            if isinstance(event, event_type)
        ]

    def publish(self, event: Any) -> Any:
        """Run every matching reactor against ``event`` and return the event."""

        for reactor in self.reactors_for(event):
            try:
                reactor(event)
            except Exception:
                logger.exception(
                    "Reactor %s failed while handling %s",
                    _reactor_name(reactor),
                    type(event).__name__,
                )
        return event


def _reactor_name(reactor: Reactor) -> str:
    name = getattr(reactor, "__qualname__", None)
    if name is None:
        name = type(reactor).__qualname__
    return name


__all__ = ["CallbackEventDispatcher", "Reactor"]
