"""
Tests for core.config — entitlement rules.
"""

from decimal import Decimal
from zoneinfo import ZoneInfoNotFoundError

import pytest

from core.config.rules import DEFAULT_RULES, EntitlementRules, load_rules


class TestEntitlementRules:
    def test_defaults(self):
        assert DEFAULT_RULES.accrual_rate == Decimal("0.1207")
        assert DEFAULT_RULES.hours_per_day == Decimal("12")
        assert DEFAULT_RULES.statutory_weeks == Decimal("5.6")
        assert DEFAULT_RULES.statutory_cap_days == Decimal("28")
        assert DEFAULT_RULES.holiday_shift_type == "HOLIDAY"
        assert DEFAULT_RULES.tz.key == "Europe/London"

    def test_hours_days_conversion(self):
        assert DEFAULT_RULES.hours_to_days(Decimal("24")) == Decimal("2")
        assert DEFAULT_RULES.days_to_hours(Decimal("1.5")) == Decimal("18.0")

    def test_invalid_rate(self):
        with pytest.raises(ValueError, match="between 0 and 1"):
            EntitlementRules(accrual_rate=Decimal("1.5"))

    def test_float_rejected(self):
        with pytest.raises(ValueError, match="must be a Decimal"):
            EntitlementRules(hours_per_day=12.0)

    def test_non_positive_hours_per_day(self):
        with pytest.raises(ValueError, match="hours_per_day"):
            EntitlementRules(hours_per_day=Decimal("0"))

    def test_unknown_time_zone(self):
        with pytest.raises(ZoneInfoNotFoundError):
            EntitlementRules(time_zone="Mars/Olympus")

    def test_frozen_immutability(self):
        with pytest.raises(AttributeError):
            DEFAULT_RULES.accrual_rate = Decimal("0.2")


class TestFromMapping:
    def test_empty_gives_defaults(self):
        assert EntitlementRules.from_mapping(None) == DEFAULT_RULES
        assert EntitlementRules.from_mapping({}) == DEFAULT_RULES

    def test_string_values_become_decimals(self):
        rules = EntitlementRules.from_mapping({"hours_per_day": "7.5"})
        assert rules.hours_per_day == Decimal("7.5")

    def test_unknown_key_rejected(self):
        with pytest.raises(ValueError, match="Unknown entitlement rule keys"):
            EntitlementRules.from_mapping({"accrual": "0.1"})


def test_load_rules_from_settings(settings):
    settings.ROTA_ENTITLEMENT_RULES = {"hours_per_day": "8", "holiday_shift_type": "LEAVE"}
    rules = load_rules()
    assert rules.hours_per_day == Decimal("8")
    assert rules.holiday_shift_type == "LEAVE"
