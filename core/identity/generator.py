"""
Rota Identity — Deterministic Identifier Generation
=====================================================
Maps a natural key to a stable UUID (RFC 4122 version 5).

Formula:
    identifier = UUIDv5(namespace, "<entity_type>:<c1>:<c2>:...")

Rules:
- Pure and total: missing/None components are empty strings, never errors
- Components are canonicalised before joining (see _component)
- ':' and '\\' inside a component are escaped so tuples cannot collide
- No clock, no randomness, no shared state beyond the namespace

Two replicas with the same namespace compute the same key for the same row.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any

from core.identity.errors import InvalidEntityType
from core.identity.namespace import IdentityNamespace, active_namespace


# ══════════════════════════════════════════════════════════════
# ENTITY TAGS
# ══════════════════════════════════════════════════════════════

STAFF_ENTITY = "human_resource"
PERIOD_ENTITY = "period"
SHIFT_ENTITY = "shift"
CHANGE_REQUEST_ENTITY = "change_request"
ENTITLEMENT_ENTITY = "holiday_entitlement"
SETTING_ENTITY = "setting"
UNAVAILABLE_STAFF_DAILY_ENTITY = "unavailable_staff_daily"

_SEPARATOR = ":"


# ══════════════════════════════════════════════════════════════
# CANONICAL COMPONENTS
# ══════════════════════════════════════════════════════════════

def _escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace(_SEPARATOR, "\\:")


def _component(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, uuid.UUID):
        return str(value)
    # datetime before date: datetime is a date subclass
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return _escape(value.isoformat())
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return _escape(format(value.normalize(), "f"))
    return _escape(str(value))


def natural_key_seed(entity_type: str, *fields: Any) -> str:
    """Build the canonical seed string hashed into the identifier."""
    if not isinstance(entity_type, str) or not entity_type.strip():
        raise InvalidEntityType(entity_type)
    parts = [_escape(entity_type.strip())]
    parts.extend(_component(f) for f in fields)
    return _SEPARATOR.join(parts)


def identify(
    entity_type: str,
    *fields: Any,
    namespace: IdentityNamespace | None = None,
) -> uuid.UUID:
    """
    Deterministic identifier for (entity_type, natural-key fields).

    Args:
        entity_type: Entity tag, e.g. 'shift'.
        *fields:     Ordered natural-key components.
        namespace:   Explicit namespace; defaults to the process namespace.
    """
    ns = namespace or active_namespace()
    return uuid.uuid5(ns.value, natural_key_seed(entity_type, *fields))


# ══════════════════════════════════════════════════════════════
# PER-ENTITY HELPERS
# ══════════════════════════════════════════════════════════════

def staff_id(staff_name, *, namespace=None) -> uuid.UUID:
    return identify(STAFF_ENTITY, staff_name, namespace=namespace)


def period_id(period_name, start_date, *, namespace=None) -> uuid.UUID:
    return identify(PERIOD_ENTITY, period_name, start_date, namespace=namespace)


def shift_id(
    period_id, staff_name, shift_start, shift_type, *, namespace=None
) -> uuid.UUID:
    return identify(
        SHIFT_ENTITY, period_id, staff_name, shift_start, shift_type,
        namespace=namespace,
    )


def change_request_id(
    staff_id, change_type, field_name, changed_at, *, namespace=None
) -> uuid.UUID:
    return identify(
        CHANGE_REQUEST_ENTITY, staff_id, change_type, field_name, changed_at,
        namespace=namespace,
    )


def entitlement_id(staff_id, year_start, *, namespace=None) -> uuid.UUID:
    return identify(ENTITLEMENT_ENTITY, staff_id, year_start, namespace=namespace)


def setting_id(type_of_setting, *, namespace=None) -> uuid.UUID:
    return identify(SETTING_ENTITY, type_of_setting, namespace=namespace)


def unavailable_staff_daily_id(period_id, day, *, namespace=None) -> uuid.UUID:
    return identify(UNAVAILABLE_STAFF_DAILY_ENTITY, period_id, day, namespace=namespace)
