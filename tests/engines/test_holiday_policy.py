"""
Rota Holiday Engine — Recalculation Policy Tests
==================================================
The decision table is exercised with hand-built RowChange envelopes.
No database.
"""

import uuid
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from core.events.change import RowChange
from core.time.accrual import AccrualYear
from engines.holiday.calculator import StaffSnapshot
from engines.holiday.policy import (
    decide_shift_change,
    decide_staff_change,
    resolve_prorata_anchor,
)

LONDON = ZoneInfo("Europe/London")
YEAR = AccrualYear(date(2025, 4, 6), date(2026, 4, 5))

ZOE = StaffSnapshot(id=uuid.uuid4(), name="Zoe", contracted_hours=Decimal("0"))
FRED = StaffSnapshot(id=uuid.uuid4(), name="Fred", contracted_hours=Decimal("36"))
NULLA = StaffSnapshot(id=uuid.uuid4(), name="Nulla", contracted_hours=None)
STAFF = {s.name: s for s in (ZOE, FRED, NULLA)}

START = datetime(2025, 6, 2, 8, tzinfo=timezone.utc)


def shift(staff_name="Fred", *, start=START, hours=12, shift_type="Day",
          overtime=False, financial_year_end=False):
    return {
        "id": uuid.uuid4(),
        "staff_name": staff_name,
        "start": start,
        "end": start + timedelta(hours=hours),
        "shift_type": shift_type,
        "overtime": overtime,
        "financial_year_end": financial_year_end,
    }


def change(operation, before=None, after=None):
    return RowChange("hr.shift.changed", operation, before=before, after=after)


def decide(row_change):
    return decide_shift_change(row_change, STAFF.get, holiday_type="HOLIDAY", tz=LONDON)


def recomputed(outcome):
    return [d.staff_name for d in outcome.decisions if d.recompute]


# ══════════════════════════════════════════════════════════════
# SHIFT CHANGES
# ══════════════════════════════════════════════════════════════

class TestZeroHoursShifts:
    @pytest.mark.parametrize("operation", ["INSERT", "DELETE"])
    def test_any_insert_or_delete_recomputes(self, operation):
        row = shift("Zoe")
        rc = change(operation, after=row) if operation == "INSERT" else change(operation, before=row)
        assert recomputed(decide(rc)) == ["Zoe"]

    def test_any_update_recomputes(self):
        before = shift("Zoe")
        after = dict(before, notes="swapped")
        assert recomputed(decide(change("UPDATE", before, after))) == ["Zoe"]

    def test_unknown_contracted_hours_treated_as_zero_hours(self):
        assert recomputed(decide(change("INSERT", after=shift("Nulla")))) == ["Nulla"]


class TestFixedHoursShifts:
    def test_insert_non_overtime_skips(self):
        assert decide(change("INSERT", after=shift())).is_noop

    def test_insert_overtime_recomputes(self):
        assert recomputed(decide(change("INSERT", after=shift(overtime=True)))) == ["Fred"]

    def test_delete_overtime_recomputes(self):
        assert recomputed(decide(change("DELETE", before=shift(overtime=True)))) == ["Fred"]

    def test_delete_non_overtime_skips(self):
        assert decide(change("DELETE", before=shift())).is_noop

    def test_non_overtime_time_edit_skips(self):
        before = shift()
        after = dict(before, start=START + timedelta(hours=2), end=START + timedelta(hours=14))
        assert decide(change("UPDATE", before, after)).is_noop

    def test_overtime_time_edit_recomputes(self):
        before = shift(overtime=True)
        after = dict(before, end=START + timedelta(hours=14))
        assert recomputed(decide(change("UPDATE", before, after))) == ["Fred"]

    def test_overtime_notes_edit_skips(self):
        before = shift(overtime=True)
        after = dict(before, notes="cover")
        assert decide(change("UPDATE", before, after)).is_noop

    @pytest.mark.parametrize("old, new", [(False, True), (True, False)])
    def test_overtime_flag_flip_recomputes(self, old, new):
        before = shift(overtime=old)
        after = dict(before, overtime=new)
        assert recomputed(decide(change("UPDATE", before, after))) == ["Fred"]


class TestReassignment:
    def test_overtime_moved_between_staff_judged_for_both(self):
        before = shift("Fred", overtime=True)
        after = dict(before, staff_name="Zoe")
        assert recomputed(decide(change("UPDATE", before, after))) == ["Fred", "Zoe"]

    def test_plain_shift_moved_to_fixed_hours_only_old_zero_hours_owner(self):
        before = shift("Zoe")
        after = dict(before, staff_name="Fred")
        assert recomputed(decide(change("UPDATE", before, after))) == ["Zoe"]


class TestUnknownStaff:
    def test_skipped(self):
        assert decide(change("INSERT", after=shift("Nobody", overtime=True))).is_noop


class TestHolidayUsage:
    def test_holiday_shift_refreshes_usage_without_recompute(self):
        outcome = decide(change("INSERT", after=shift(shift_type="HOLIDAY")))
        [decision] = outcome.decisions
        assert decision.refresh_usage
        assert not decision.recompute

    def test_changing_away_from_holiday_still_refreshes(self):
        before = shift(shift_type="HOLIDAY")
        after = dict(before, shift_type="Day")
        [decision] = decide(change("UPDATE", before, after)).decisions
        assert decision.refresh_usage


class TestYearRenewal:
    FYE_START = datetime(2026, 4, 5, 22, tzinfo=timezone.utc)

    def test_insert_with_flag(self):
        outcome = decide(change("INSERT", after=shift(start=self.FYE_START, financial_year_end=True)))
        assert outcome.renew_after == date(2026, 4, 5)

    def test_update_false_to_true(self):
        before = shift(start=self.FYE_START)
        after = dict(before, financial_year_end=True)
        assert decide(change("UPDATE", before, after)).renew_after == date(2026, 4, 5)

    def test_update_already_flagged_does_not_renew(self):
        before = shift(start=self.FYE_START, financial_year_end=True)
        after = dict(before, notes="x")
        assert decide(change("UPDATE", before, after)).renew_after is None

    def test_uses_local_date(self):
        late = datetime(2026, 4, 5, 23, 30, tzinfo=timezone.utc)  # 00:30 BST on 6 April
        outcome = decide(change("INSERT", after=shift(start=late, financial_year_end=True)))
        assert outcome.renew_after == date(2026, 4, 6)


# ══════════════════════════════════════════════════════════════
# STAFF CHANGES
# ══════════════════════════════════════════════════════════════

def staff_row(**overrides):
    row = {
        "id": FRED.id,
        "name": "Fred",
        "is_active": True,
        "contracted_hours": Decimal("36"),
        "employment_start_date": date(2020, 1, 1),
        "employment_end_date": None,
    }
    row.update(overrides)
    return row


def staff_change(operation, before=None, after=None, overrides=None):
    return RowChange(
        "hr.staff.changed", operation, before=before, after=after, overrides=overrides or {}
    )


class TestStaffChanges:
    def test_contracted_hours_change_recomputes(self):
        outcome = decide_staff_change(
            staff_change("UPDATE", staff_row(), staff_row(contracted_hours=Decimal("20")))
        )
        [decision] = outcome.decisions
        assert decision.recompute
        assert decision.staff_id == FRED.id

    def test_none_transition_recomputes(self):
        outcome = decide_staff_change(
            staff_change("UPDATE", staff_row(contracted_hours=None), staff_row(contracted_hours=Decimal("0")))
        )
        assert outcome.decisions

    def test_same_value_different_scale_skips(self):
        outcome = decide_staff_change(
            staff_change("UPDATE", staff_row(contracted_hours=Decimal("36.00")), staff_row())
        )
        assert outcome.is_noop

    def test_reverted_edit_retriggers(self):
        first = decide_staff_change(
            staff_change("UPDATE", staff_row(), staff_row(contracted_hours=Decimal("20")))
        )
        revert = decide_staff_change(
            staff_change("UPDATE", staff_row(contracted_hours=Decimal("20")), staff_row())
        )
        assert first.decisions and revert.decisions

    def test_employment_end_passed_as_override(self):
        outcome = decide_staff_change(
            staff_change("UPDATE", staff_row(), staff_row(employment_end_date=date(2025, 12, 31)))
        )
        assert outcome.decisions[0].employment_end_override == date(2025, 12, 31)

    def test_explicit_override_wins(self):
        outcome = decide_staff_change(
            staff_change(
                "UPDATE",
                staff_row(),
                staff_row(employment_end_date=date(2025, 12, 31)),
                overrides={"employment_end_date": date(2025, 11, 30)},
            )
        )
        assert outcome.decisions[0].employment_end_override == date(2025, 11, 30)

    def test_unrelated_field_skips(self):
        assert decide_staff_change(
            staff_change("UPDATE", staff_row(), staff_row(is_active=False))
        ).is_noop

    def test_insert_recomputes(self):
        assert decide_staff_change(staff_change("INSERT", after=staff_row())).decisions

    def test_delete_skips(self):
        assert decide_staff_change(staff_change("DELETE", before=staff_row())).is_noop


# ══════════════════════════════════════════════════════════════
# PRO-RATA ANCHOR
# ══════════════════════════════════════════════════════════════

class TestProRataAnchor:
    def test_change_request_inside_year_wins_over_employment_start(self):
        changes = [datetime(2025, 9, 1, 12, tzinfo=timezone.utc)]
        assert resolve_prorata_anchor(changes, YEAR, date(2020, 1, 1), LONDON) == date(2025, 9, 1)

    def test_earliest_change_in_year_taken(self):
        changes = [
            datetime(2024, 12, 1, tzinfo=timezone.utc),
            datetime(2025, 7, 1, 12, tzinfo=timezone.utc),
            datetime(2025, 9, 1, 12, tzinfo=timezone.utc),
        ]
        assert resolve_prorata_anchor(iter(changes), YEAR, None, LONDON) == date(2025, 7, 1)

    def test_change_after_year_ignored(self):
        changes = [datetime(2026, 5, 1, tzinfo=timezone.utc)]
        assert resolve_prorata_anchor(changes, YEAR, date(2025, 8, 1), LONDON) == date(2025, 8, 1)

    def test_employment_start_clamped_to_year_start(self):
        assert resolve_prorata_anchor([], YEAR, date(2020, 1, 1), LONDON) == YEAR.start

    def test_no_anchor_without_start_or_change(self):
        assert resolve_prorata_anchor([], YEAR, None, LONDON) is None

    def test_sequence_consumed_lazily(self):
        consumed = []

        def stream():
            for dt in (datetime(2025, 7, 1, 12, tzinfo=timezone.utc),
                       datetime(2025, 8, 1, 12, tzinfo=timezone.utc)):
                consumed.append(dt)
                yield dt

        resolve_prorata_anchor(stream(), YEAR, None, LONDON)
        assert len(consumed) == 1
