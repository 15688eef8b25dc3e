"""
Rota Event Bus — Subscriber Registry
======================================
Controls which handlers hear which row-change event types.

Rules:
- Event types follow engine.domain.action (e.g. 'hr.shift.changed')
- Handlers run in registration order
- Same handler twice for one event type is forbidden
- An engine listening to its own events must say so explicitly
- In-memory and thread-safe
"""

import logging
from threading import Lock
from typing import Callable

from core.events.errors import (
    DuplicateSubscriberError,
    EventBusError,
    InvalidEventTypeFormat,
    SelfSubscriptionError,
)

logger = logging.getLogger("rota.events")


def _handler_name(handler: Callable) -> str:
    return getattr(handler, "__qualname__", None) or repr(handler)


class SubscriberRegistry:
    """
    Maps an event_type to an ordered list of (handler, subscriber_engine).
    """

    def __init__(self):
        self._subscribers: dict[str, list[tuple[Callable, str]]] = {}
        self._lock = Lock()

    @staticmethod
    def _validate_event_type_format(event_type: str) -> None:
        if not event_type or not isinstance(event_type, str):
            raise InvalidEventTypeFormat(event_type or "")
        parts = event_type.strip().split(".")
        if len(parts) < 3 or not all(parts):
            raise InvalidEventTypeFormat(event_type)

    @staticmethod
    def _source_engine(event_type: str) -> str:
        return event_type.split(".")[0]

    def register_subscriber(
        self,
        event_type: str,
        handler: Callable,
        subscriber_engine: str,
        allow_self_subscription: bool = False,
    ) -> None:
        """
        Register a handler for an event type.

        Raises:
            InvalidEventTypeFormat:   Bad event type format
            DuplicateSubscriberError: Handler already registered
            SelfSubscriptionError:    Engine subscribing to own events
        """
        self._validate_event_type_format(event_type)

        if not callable(handler):
            raise EventBusError(
                f"Handler must be callable, got {type(handler)}."
            )

        if (
            self._source_engine(event_type) == subscriber_engine
            and not allow_self_subscription
        ):
            raise SelfSubscriptionError(subscriber_engine, event_type)

        name = _handler_name(handler)
        with self._lock:
            bucket = self._subscribers.setdefault(event_type, [])
            if any(existing == handler for existing, _ in bucket):
                raise DuplicateSubscriberError(event_type, name)
            bucket.append((handler, subscriber_engine))

        logger.info(
            f"Subscriber registered: {name} → {event_type} "
            f"(from engine: {subscriber_engine})"
        )

    def unregister_engine(self, subscriber_engine: str) -> int:
        """Drop every handler registered by an engine. Returns count removed."""
        removed = 0
        with self._lock:
            for event_type in list(self._subscribers):
                kept = [
                    entry for entry in self._subscribers[event_type]
                    if entry[1] != subscriber_engine
                ]
                removed += len(self._subscribers[event_type]) - len(kept)
                if kept:
                    self._subscribers[event_type] = kept
                else:
                    del self._subscribers[event_type]
        return removed

    def get_subscribers(self, event_type: str) -> list[tuple[Callable, str]]:
        """Subscribers in registration order; empty list if none."""
        with self._lock:
            return list(self._subscribers.get(event_type, []))

    def has_subscribers(self, event_type: str) -> bool:
        with self._lock:
            return bool(self._subscribers.get(event_type))

    def get_all_event_types(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._subscribers.keys())

    def subscriber_count(self, event_type: str) -> int:
        with self._lock:
            return len(self._subscribers.get(event_type, []))
