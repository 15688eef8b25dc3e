"""
Rota Bootstrap — Invariant Checks
===================================
Each function verifies one system law.
If any check fails → SystemBootstrapError is raised.

These checks do NOT:
- Run migrations
- Create tables
- Silence failures

The one write performed here is the first namespace pin of a fresh
database; after that the pin is only ever compared.
"""

import logging

from django.db import connection

from core.bootstrap.errors import SystemBootstrapError

logger = logging.getLogger("rota.bootstrap")


REQUIRED_TABLES = (
    "rota_identity_namespace_pin",
    "rota_human_resource",
    "rota_period",
    "rota_shift",
    "rota_change_request",
    "rota_holiday_entitlements",
)


# ══════════════════════════════════════════════════════════════
# CHECK 1: Required Tables Exist
# ══════════════════════════════════════════════════════════════

def check_required_tables():
    """Refuse start when any Rota table is missing. No auto-migration."""
    table_names = set(connection.introspection.table_names())
    missing = [name for name in REQUIRED_TABLES if name not in table_names]

    if missing:
        raise SystemBootstrapError(
            invariant="REQUIRED_TABLES",
            detail=(
                f"Tables {missing} do not exist. "
                "Run migrations before starting Rota."
            ),
        )

    logger.info("✓ Rota tables exist.")


# ══════════════════════════════════════════════════════════════
# CHECK 2: Identity Namespace Matches The Pin
# ══════════════════════════════════════════════════════════════

def check_identity_namespace():
    """
    Configured namespace must equal the pinned one.
    A fresh database is pinned to the configured namespace.
    """
    from core.identity.errors import IdentityError
    from core.identity.namespace import active_namespace
    from core.identity_store.service import pin_namespace, verify_namespace_pin

    try:
        configured = active_namespace()
    except ValueError as exc:
        raise SystemBootstrapError(
            invariant="IDENTITY_NAMESPACE",
            detail=f"ROTA_IDENTITY_NAMESPACE is invalid: {exc}",
        ) from exc

    try:
        pinned = verify_namespace_pin(configured)
        if pinned is None:
            pin_namespace(configured)
            logger.info(f"✓ Identity namespace pinned on first boot: {configured}")
            return
    except IdentityError as exc:
        raise SystemBootstrapError(
            invariant="IDENTITY_NAMESPACE",
            detail=str(exc),
        ) from exc

    logger.info(f"✓ Identity namespace matches pin: {pinned}")


# ══════════════════════════════════════════════════════════════
# CHECK 3: Entitlement Rules Load
# ══════════════════════════════════════════════════════════════

def check_entitlement_rules():
    """ROTA_ENTITLEMENT_RULES must build a valid rules object."""
    from core.config.rules import load_rules

    try:
        rules = load_rules()
    except Exception as exc:
        raise SystemBootstrapError(
            invariant="ENTITLEMENT_RULES",
            detail=f"ROTA_ENTITLEMENT_RULES is invalid: {exc}",
        ) from exc

    logger.info(
        f"✓ Entitlement rules OK (rate {rules.accrual_rate}, "
        f"{rules.hours_per_day}h/day, zone {rules.time_zone})."
    )


# ══════════════════════════════════════════════════════════════
# CHECK 4: Recalculation Handlers Registered
# ══════════════════════════════════════════════════════════════

def check_change_subscriptions():
    """
    The holiday engine must be listening to shift and staff changes,
    otherwise writes would silently leave entitlements stale.
    """
    from engines.hr.signals import (
        SHIFT_CHANGED,
        STAFF_CHANGED,
        change_registry,
    )

    missing = [
        event_type
        for event_type in (SHIFT_CHANGED, STAFF_CHANGED)
        if not change_registry.has_subscribers(event_type)
    ]
    if missing:
        raise SystemBootstrapError(
            invariant="CHANGE_SUBSCRIPTIONS",
            detail=f"No subscribers for {missing}. Is engines.holiday installed?",
        )

    logger.info("✓ Change subscriptions registered.")
