"""
Rota Identity — Public API
===========================
Deterministic, namespace-scoped identifiers derived from natural keys.
"""

from core.identity.errors import (
    IdentityError,
    InvalidEntityType,
    NamespaceLockedError,
)
from core.identity.generator import (
    CHANGE_REQUEST_ENTITY,
    ENTITLEMENT_ENTITY,
    PERIOD_ENTITY,
    SETTING_ENTITY,
    SHIFT_ENTITY,
    STAFF_ENTITY,
    UNAVAILABLE_STAFF_DAILY_ENTITY,
    change_request_id,
    entitlement_id,
    identify,
    natural_key_seed,
    period_id,
    setting_id,
    shift_id,
    staff_id,
    unavailable_staff_daily_id,
)
from core.identity.namespace import (
    DEFAULT_NAMESPACE,
    IdentityNamespace,
    active_namespace,
    configure_namespace,
)

__all__ = [
    "identify",
    "natural_key_seed",
    "staff_id",
    "period_id",
    "shift_id",
    "change_request_id",
    "entitlement_id",
    "setting_id",
    "unavailable_staff_daily_id",
    "STAFF_ENTITY",
    "PERIOD_ENTITY",
    "SHIFT_ENTITY",
    "CHANGE_REQUEST_ENTITY",
    "ENTITLEMENT_ENTITY",
    "SETTING_ENTITY",
    "UNAVAILABLE_STAFF_DAILY_ENTITY",
    "IdentityNamespace",
    "DEFAULT_NAMESPACE",
    "active_namespace",
    "configure_namespace",
    "IdentityError",
    "InvalidEntityType",
    "NamespaceLockedError",
]
