"""
Rota Event Bus — Dispatcher
=============================
Routes row changes to registered subscribers, synchronously.

Dispatch behavior:
1. Look up subscribers by event_type
2. Execute handlers sequentially, in registration order
3. On the first handler failure: log it and re-raise
4. Remaining handlers are NOT run

Dispatch happens inside the writer's transaction. A failing handler
must abort that transaction so no derived row is left half-updated;
swallowing the error here would commit a stale entitlement.

This module does NOT:
- Write to the DB
- Open or commit transactions
- Interpret snapshots
"""

import logging

from core.events.change import RowChange
from core.events.registry import SubscriberRegistry

logger = logging.getLogger("rota.events")


def dispatch(change: RowChange, registry: SubscriberRegistry) -> dict:
    """
    Dispatch a row change to all subscribers of its event type.

    Returns:
        {
            'event_type': str,
            'operation': str,
            'subscribers_notified': int,
        }

    Raises:
        Whatever the first failing handler raised.
    """
    event_type = change.event_type
    subscribers = registry.get_subscribers(event_type)

    result = {
        "event_type": event_type,
        "operation": change.operation,
        "subscribers_notified": 0,
    }

    if not subscribers:
        logger.debug(f"No subscribers for '{event_type}' ({change.operation})")
        return result

    for handler, subscriber_engine in subscribers:
        handler_name = getattr(handler, "__qualname__", str(handler))
        try:
            handler(change)
        except Exception as exc:
            logger.error(
                f"Subscriber failed: {handler_name} (engine: {subscriber_engine}) "
                f"for {event_type}/{change.operation}: {exc}",
                exc_info=True,
            )
            raise
        result["subscribers_notified"] += 1
        logger.debug(
            f"Dispatched {event_type}/{change.operation} → {handler_name} "
            f"(engine: {subscriber_engine})"
        )

    return result
