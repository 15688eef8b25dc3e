"""
Rota Event Bus — Public API
=============================
The record store reports row changes; engines listen and react
inside the same transaction.
"""

from core.events.change import ChangeOperation, RowChange
from core.events.dispatcher import dispatch
from core.events.errors import (
    DuplicateSubscriberError,
    EventBusError,
    InvalidEventTypeFormat,
    SelfSubscriptionError,
)
from core.events.registry import SubscriberRegistry

__all__ = [
    "dispatch",
    "RowChange",
    "ChangeOperation",
    "SubscriberRegistry",
    "EventBusError",
    "InvalidEventTypeFormat",
    "DuplicateSubscriberError",
    "SelfSubscriptionError",
]
