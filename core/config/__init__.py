"""
Rota Core Config — Public API
===============================
Settings-driven statutory accrual rules.
"""

from core.config.rules import (
    DEFAULT_RULES,
    EntitlementRules,
    load_rules,
)

__all__ = [
    "EntitlementRules",
    "DEFAULT_RULES",
    "load_rules",
]
