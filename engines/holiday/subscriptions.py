"""
Rota Holiday Engine — Change Subscriptions
============================================
Connects HR row changes to the recalculation policy and service.
Handlers run inside the writer's transaction; their exceptions abort it.
"""

from __future__ import annotations

import logging

from core.events.change import RowChange
from core.events.registry import SubscriberRegistry
from engines.holiday.policy import decide_shift_change, decide_staff_change
from engines.holiday.wiring import get_service
from engines.hr.signals import SHIFT_CHANGED, STAFF_CHANGED, change_registry

logger = logging.getLogger("rota.holiday")

HOLIDAY_ENGINE = "holiday"


def on_shift_changed(change: RowChange) -> None:
    service = get_service()
    outcome = decide_shift_change(
        change,
        service.staff.by_name,
        holiday_type=service.rules.holiday_shift_type,
        tz=service.rules.tz,
    )
    if outcome.is_noop:
        logger.debug(f"Shift {change.operation} needs no recompute.")
        return
    service.apply(outcome)


def on_staff_changed(change: RowChange) -> None:
    outcome = decide_staff_change(change)
    if outcome.is_noop:
        return
    get_service().apply(outcome)


SUBSCRIPTIONS = (
    (SHIFT_CHANGED, on_shift_changed),
    (STAFF_CHANGED, on_staff_changed),
)


def register_subscriptions(registry: SubscriberRegistry = change_registry) -> int:
    """Register the holiday handlers once; returns how many were added."""
    added = 0
    for event_type, handler in SUBSCRIPTIONS:
        if any(existing is handler for existing, _ in registry.get_subscribers(event_type)):
            continue
        registry.register_subscriber(event_type, handler, HOLIDAY_ENGINE)
        added += 1
    return added
