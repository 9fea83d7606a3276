"""Recovery diagnostics delivered synchronously to caller-supplied handlers.

The coordinator and the reorderer report every decision they make:

``order_recovered``
    ``owner``, ``origin`` (``"source"`` or ``"binary"``), ``names``.
``order_unavailable``
    ``owner``; neither a source file nor a class file was found.
``order_failed``
    ``owner``, ``origin``, ``error``; the chosen strategy gave up.
``run_reordered``
    ``owner``, ``before``, ``after``; member names of one run.
``run_skipped``
    ``owner``, ``reason``; the run was left as supplied.

Handlers run inline on the calling thread and their exceptions propagate.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable, DefaultDict

__all__ = ["Event", "EventHandler", "EventBus", "RECOVERY_EVENTS", "EVENT_PAYLOAD_KEYS"]

EVENT_PAYLOAD_KEYS: dict[str, frozenset[str]] = {
    "order_recovered": frozenset({"owner", "origin", "names"}),
    "order_unavailable": frozenset({"owner"}),
    "order_failed": frozenset({"owner", "origin", "error"}),
    "run_reordered": frozenset({"owner", "before", "after"}),
    "run_skipped": frozenset({"owner", "reason"}),
}

RECOVERY_EVENTS = tuple(EVENT_PAYLOAD_KEYS)


@dataclass(frozen=True)
class Event:
    """One recovery decision; ``payload["owner"]`` is always the qualified type name."""

    name: str
    payload: dict[str, Any]

    @property
    def owner(self) -> str:
        return self.payload["owner"]


EventHandler = Callable[[Event], None]


@dataclass(frozen=True)
class _Subscription:
    priority: int
    order: int
    handler: EventHandler


class EventBus:
    """Higher priority handlers run first; equal priorities run in subscription order."""

    def __init__(self) -> None:
        self._subscriptions: DefaultDict[str, list[_Subscription]] = defaultdict(list)
        self._counter = 0

    def on(self, event_name: str, handler: EventHandler, priority: int = 0) -> None:
        _check_name(event_name)
        self._subscriptions[event_name].append(_Subscription(priority, self._counter, handler))
        self._counter += 1

    def on_all(self, handler: EventHandler, priority: int = 0) -> None:
        """Subscribe ``handler`` to every recovery event."""
        for event_name in RECOVERY_EVENTS:
            self.on(event_name, handler, priority=priority)

    def emit(self, event_name: str, payload: dict[str, Any]) -> None:
        _check_name(event_name)
        missing = EVENT_PAYLOAD_KEYS[event_name] - payload.keys()
        if missing:
            raise ValueError(f"{event_name} payload lacks {', '.join(sorted(missing))}")
        event = Event(event_name, payload)
        for subscription in sorted(self._subscriptions[event_name], key=lambda item: (-item.priority, item.order)):
            subscription.handler(event)


def _check_name(event_name: str) -> None:
    if event_name not in EVENT_PAYLOAD_KEYS:
        raise ValueError(f"unknown recovery event {event_name!r}")
