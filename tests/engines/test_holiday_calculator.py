"""
Rota Holiday Engine — Entitlement Calculator Tests
====================================================
Pure accrual math against in-memory staff and shift stubs.
"""

import uuid
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from core.config.rules import DEFAULT_RULES
from engines.holiday.calculator import (
    EntitlementCalculator,
    ShiftRecord,
    StaffSnapshot,
    pro_rata_factor,
    require_valid_range,
    statutory_entitlement_days,
)
from engines.holiday.errors import InvalidRange, StaffNotFound
from core.time.temporal import DateWindow

YEAR_START = date(2025, 4, 6)
YEAR_END = date(2026, 4, 5)

ALICE = StaffSnapshot(id=uuid.uuid4(), name="Alice", contracted_hours=Decimal("0"))
BOB = StaffSnapshot(id=uuid.uuid4(), name="Bob", contracted_hours=Decimal("37.5"))


class StubDirectory:
    def __init__(self, *staff):
        self._by_id = {s.id: s for s in staff}

    def get(self, staff_id):
        return self._by_id.get(staff_id)

    def by_name(self, name):
        return next((s for s in self._by_id.values() if s.name == name), None)

    def active_staff(self):
        return [s for s in self._by_id.values() if s.is_active]


class StubHistory:
    """Returns every shift; the calculator applies the window itself."""

    def __init__(self):
        self.shifts = {}

    def add(self, name, start, hours, shift_type="Day", overtime=False):
        self.shifts.setdefault(name, []).append(
            ShiftRecord(start=start, end=start + timedelta(hours=hours),
                        shift_type=shift_type, overtime=overtime)
        )

    def shifts_for(self, staff_name, window, tz):
        return list(self.shifts.get(staff_name, []))


def at(y, m, d, h=8):
    return datetime(y, m, d, h, tzinfo=timezone.utc)


@pytest.fixture
def history():
    return StubHistory()


@pytest.fixture
def calc(history):
    return EntitlementCalculator(StubDirectory(ALICE, BOB), history, DEFAULT_RULES)


# ══════════════════════════════════════════════════════════════
# ZERO-HOURS
# ══════════════════════════════════════════════════════════════

class TestZeroHour:
    def test_hundred_hours_full_year(self, calc, history):
        for day in range(10):
            history.add("Alice", at(2025, 5, 1 + day), 10)
        days = calc.calc_zero_hour(ALICE.id, YEAR_START, YEAR_END)
        assert days == pytest.approx(Decimal("100") * Decimal("0.1207") / Decimal("12"))
        assert str(days).startswith("1.00583")

    def test_holiday_shifts_excluded(self, calc, history):
        history.add("Alice", at(2025, 5, 1), 12)
        history.add("Alice", at(2025, 5, 2), 12, shift_type="HOLIDAY")
        assert calc.worked_hours("Alice", DateWindow(YEAR_START, YEAR_END)) == Decimal(12)

    def test_shifts_outside_year_excluded(self, calc, history):
        history.add("Alice", at(2025, 4, 4), 10)
        history.add("Alice", at(2026, 4, 7), 10)
        assert calc.calc_zero_hour(ALICE.id, YEAR_START, YEAR_END) == 0

    def test_end_date_inclusive_in_local_time(self, calc, history):
        # 5 April 22:00 UTC is 23:00 BST, still the last day of the year
        history.add("Alice", datetime(2026, 4, 5, 22, tzinfo=timezone.utc), 6)
        # 5 April 23:30 UTC 2025 is 00:30 BST on 6 April, the first day
        history.add("Alice", datetime(2025, 4, 5, 23, 30, tzinfo=timezone.utc), 6)
        assert calc.worked_hours("Alice", DateWindow(YEAR_START, YEAR_END)) == Decimal(12)

    def test_employment_window_limits_hours_and_prorates(self, calc, history):
        history.add("Alice", at(2025, 5, 1), 10)
        history.add("Alice", at(2025, 11, 1), 10)
        emp_start = date(2025, 10, 5)
        days = calc.calc_zero_hour(ALICE.id, YEAR_START, YEAR_END, emp_start, None)
        factor = Decimal((YEAR_END - emp_start).days) / Decimal(364)
        expected = Decimal(10) * Decimal("0.1207") / Decimal(12) * factor
        assert days == pytest.approx(expected)

    def test_employment_starting_after_year_gives_zero(self, calc, history):
        history.add("Alice", at(2025, 5, 1), 10)
        assert calc.calc_zero_hour(ALICE.id, YEAR_START, YEAR_END, date(2026, 6, 1), None) == 0

    def test_unknown_staff(self, calc):
        with pytest.raises(StaffNotFound):
            calc.calc_zero_hour(uuid.uuid4(), YEAR_START, YEAR_END)

    def test_inverted_shift_counts_zero(self, calc, history):
        history.add("Alice", at(2025, 5, 1), -5)
        assert calc.calc_zero_hour(ALICE.id, YEAR_START, YEAR_END) == 0


# ══════════════════════════════════════════════════════════════
# FIXED HOURS
# ══════════════════════════════════════════════════════════════

class TestFixed:
    def test_full_year_statutory(self, calc):
        days = calc.calc_fixed(BOB.id, Decimal("37.5"), YEAR_START, YEAR_END, YEAR_START, YEAR_END)
        assert days == Decimal("37.5") / Decimal("12") * Decimal("5.6")
        assert days == Decimal("17.5")

    def test_overtime_adds_hours_over_twelve(self, calc, history):
        base = calc.calc_fixed(BOB.id, Decimal("37.5"), YEAR_START, YEAR_END, YEAR_START, YEAR_END)
        history.add("Bob", at(2025, 7, 1), 10, overtime=True)
        with_overtime = calc.calc_fixed(
            BOB.id, Decimal("37.5"), YEAR_START, YEAR_END, YEAR_START, YEAR_END
        )
        assert with_overtime - base == pytest.approx(Decimal(10) / Decimal(12))

    def test_non_overtime_shifts_ignored(self, calc, history):
        history.add("Bob", at(2025, 7, 1), 10)
        days = calc.calc_fixed(BOB.id, Decimal("37.5"), None, None, YEAR_START, YEAR_END)
        assert days == Decimal("17.5")

    def test_overtime_not_prorated(self, calc, history):
        history.add("Bob", at(2025, 12, 1), 12, overtime=True)
        emp_start = date(2025, 10, 5)
        days = calc.calc_fixed(BOB.id, Decimal("37.5"), emp_start, None, YEAR_START, YEAR_END)
        factor = Decimal((YEAR_END - emp_start).days) / Decimal(364)
        assert days == pytest.approx(Decimal("17.5") * factor + Decimal(1))

    def test_cap_applies_to_base_only(self, calc, history):
        history.add("Bob", at(2025, 7, 1), 24, overtime=True)
        days = calc.calc_fixed(BOB.id, Decimal("80"), None, None, YEAR_START, YEAR_END)
        assert days == Decimal("28") + Decimal("2")

    def test_unknown_staff(self, calc):
        with pytest.raises(StaffNotFound):
            calc.calc_fixed(uuid.uuid4(), Decimal("10"), None, None, YEAR_START, YEAR_END)


class TestStatutoryFormula:
    def test_year_end_defaults_to_anniversary_minus_one(self):
        with_default = statutory_entitlement_days(Decimal("36"), date(2025, 10, 5), None, YEAR_START)
        explicit = statutory_entitlement_days(
            Decimal("36"), date(2025, 10, 5), None, YEAR_START, YEAR_END
        )
        assert with_default == explicit

    def test_zero_contracted_hours(self):
        assert statutory_entitlement_days(Decimal("0"), None, None, YEAR_START) == 0

    def test_start_on_year_start_is_full(self):
        assert statutory_entitlement_days(
            Decimal("36"), YEAR_START, None, YEAR_START, YEAR_END
        ) == Decimal("16.8")

    def test_never_negative(self):
        days = statutory_entitlement_days(
            Decimal("36"), date(2026, 5, 1), date(2026, 4, 1), YEAR_START, YEAR_END
        )
        assert days == 0


class TestProRataFactor:
    YEAR = DateWindow(YEAR_START, YEAR_END)

    def test_no_bounds_is_one(self):
        assert pro_rata_factor(self.YEAR, None, None) == 1

    def test_start_on_year_start_is_one(self):
        assert pro_rata_factor(self.YEAR, YEAR_START, None) == 1

    def test_start_after_year_end_is_zero(self):
        assert pro_rata_factor(self.YEAR, date(2026, 5, 1), None) == 0

    def test_within_unit_interval(self):
        factor = pro_rata_factor(self.YEAR, date(2025, 6, 1), date(2025, 12, 1))
        assert 0 < factor < 1


def test_require_valid_range():
    assert require_valid_range(YEAR_START, YEAR_END) == DateWindow(YEAR_START, YEAR_END)
    with pytest.raises(InvalidRange):
        require_valid_range(YEAR_END, YEAR_START)


def test_require_valid_range_min_days():
    assert require_valid_range(YEAR_START, YEAR_START) == DateWindow(YEAR_START, YEAR_START)
    with pytest.raises(InvalidRange):
        require_valid_range(YEAR_START, YEAR_START, min_days=1)
