"""
Rota Bootstrap — Self-Check Orchestrator
==========================================
Runs all invariant checks at system startup.
If any check fails → SystemBootstrapError propagates → system refuses to start.

Check order:
1. Required tables exist
2. Identity namespace matches the database pin
3. Entitlement rules load
4. Recalculation handlers registered
"""

import logging

from core.bootstrap.invariants import (
    check_change_subscriptions,
    check_entitlement_rules,
    check_identity_namespace,
    check_required_tables,
)

logger = logging.getLogger("rota.bootstrap")


def run_bootstrap_checks():
    """
    Execute all system invariant checks.
    Called once at startup via AppConfig.ready().
    """
    logger.info("═══ Rota Bootstrap Self-Check Starting ═══")

    check_required_tables()
    check_identity_namespace()
    check_entitlement_rules()
    check_change_subscriptions()

    logger.info("═══ Rota Bootstrap Self-Check PASSED ═══")
