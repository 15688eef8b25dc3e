"""
Rota Core Config — Entitlement Rules
======================================
Doctrine: no statutory constants buried in engine logic.
Accrual rates, the hours-per-day convention and the holiday-taken tag
come from settings, validated once into a frozen rules object.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Mapping, Optional
from zoneinfo import ZoneInfo


# ══════════════════════════════════════════════════════════════
# ENTITLEMENT RULES
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class EntitlementRules:
    """
    Statutory holiday accrual configuration.

    accrual_rate:       Holiday hours earned per hour worked (zero-hours).
                        0.1207 = 5.6 weeks / 46.4 working weeks.
    hours_per_day:      Organisation convention for converting hours to days.
    statutory_weeks:    Weeks of holiday per year for fixed-hours contracts.
    statutory_cap_days: Upper bound on the fixed-hours base entitlement.
    holiday_shift_type: Shift type tag for holiday taken.
    time_zone:          Zone in which shift dates are evaluated.
    year_start_month/day: First day of the default accrual year.
    """

    accrual_rate: Decimal = Decimal("0.1207")
    hours_per_day: Decimal = Decimal("12")
    statutory_weeks: Decimal = Decimal("5.6")
    statutory_cap_days: Decimal = Decimal("28")
    holiday_shift_type: str = "HOLIDAY"
    time_zone: str = "Europe/London"
    year_start_month: int = 4
    year_start_day: int = 6

    def __post_init__(self) -> None:
        for name in ("accrual_rate", "hours_per_day", "statutory_weeks", "statutory_cap_days"):
            value = getattr(self, name)
            if not isinstance(value, Decimal):
                raise ValueError(f"{name} must be a Decimal, got {type(value).__name__}.")
        if not 0 <= self.accrual_rate <= 1:
            raise ValueError(f"accrual_rate must be between 0 and 1, got {self.accrual_rate}.")
        if self.hours_per_day <= 0:
            raise ValueError("hours_per_day must be positive.")
        if self.statutory_weeks < 0 or self.statutory_cap_days < 0:
            raise ValueError("statutory_weeks and statutory_cap_days must be >= 0.")
        if not self.holiday_shift_type:
            raise ValueError("holiday_shift_type must be non-empty.")
        if not 1 <= self.year_start_month <= 12:
            raise ValueError("year_start_month must be 1..12.")
        # Raises ZoneInfoNotFoundError for unknown zones
        ZoneInfo(self.time_zone)

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.time_zone)

    def hours_to_days(self, hours: Decimal) -> Decimal:
        return hours / self.hours_per_day

    def days_to_hours(self, days: Decimal) -> Decimal:
        return days * self.hours_per_day

    @classmethod
    def from_mapping(cls, raw: Optional[Mapping[str, Any]]) -> "EntitlementRules":
        """Build from the ROTA_ENTITLEMENT_RULES settings mapping."""
        if not raw:
            return cls()
        decimal_fields = {
            "accrual_rate", "hours_per_day", "statutory_weeks", "statutory_cap_days",
        }
        known = set(cls.__dataclass_fields__)
        unknown = set(raw) - known
        if unknown:
            raise ValueError(f"Unknown entitlement rule keys: {sorted(unknown)}")
        values = {}
        for key, value in raw.items():
            values[key] = Decimal(str(value)) if key in decimal_fields else value
        return cls(**values)


DEFAULT_RULES = EntitlementRules()


def load_rules() -> EntitlementRules:
    """Rules from Django settings (ROTA_ENTITLEMENT_RULES), or defaults."""
    from django.conf import settings

    return EntitlementRules.from_mapping(
        getattr(settings, "ROTA_ENTITLEMENT_RULES", None)
    )
