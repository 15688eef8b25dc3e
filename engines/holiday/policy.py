"""
Rota Holiday Engine — Recalculation Policy
============================================
Decides, from one RowChange, whether entitlement must be recomputed.

The policy is pure: it reads the change envelope and a staff lookup,
and returns decisions. It never writes.

Shift changes:
    zero-hours staff   → always recompute (accrual follows hours worked)
    fixed-hours staff  → insert/delete: iff the shift is overtime
                         update: iff overtime flag changed, or overtime and
                         start/end changed
    staff reassignment → old owner judged as a delete, new owner as an insert
    unknown staff name → skip
    HOLIDAY shift      → refresh days/hours taken
    financial-year-end → flag set on insert, or false→true on update,
                         renews entitlements for the following year

Staff changes:
    contracted hours changed (None-aware) or employment dates changed
    → recompute with the after-image employment end date as override
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from typing import Any, Callable, Iterable, Mapping, Optional

from core.events.change import ChangeOperation, RowChange
from core.time.accrual import AccrualYear
from core.time.temporal import local_date
from engines.holiday.calculator import StaffSnapshot

logger = logging.getLogger("rota.holiday")

StaffLookup = Callable[[str], Optional[StaffSnapshot]]

_STAFF_TRIGGER_FIELDS = (
    "contracted_hours",
    "employment_start_date",
    "employment_end_date",
)


@dataclass(frozen=True)
class RecalculationDecision:
    staff_id: uuid.UUID
    staff_name: str
    recompute: bool = False
    refresh_usage: bool = False
    employment_end_override: Optional[date] = None
    reason: str = ""


@dataclass(frozen=True)
class PolicyOutcome:
    decisions: tuple[RecalculationDecision, ...] = ()
    renew_after: Optional[date] = None

    @property
    def is_noop(self) -> bool:
        return not self.decisions and self.renew_after is None


# ══════════════════════════════════════════════════════════════
# SHIFT CHANGES
# ══════════════════════════════════════════════════════════════

def _overtime_relevant(
    operation: str,
    before: Optional[Mapping[str, Any]],
    after: Optional[Mapping[str, Any]],
) -> bool:
    if operation == ChangeOperation.INSERT:
        return bool(after["overtime"])
    if operation == ChangeOperation.DELETE:
        return bool(before["overtime"])
    if bool(before["overtime"]) != bool(after["overtime"]):
        return True
    return bool(after["overtime"]) and (
        before["start"] != after["start"] or before["end"] != after["end"]
    )


def _touches_holiday(
    before: Optional[Mapping[str, Any]],
    after: Optional[Mapping[str, Any]],
    holiday_type: str,
) -> bool:
    return any(
        snap is not None and snap.get("shift_type") == holiday_type
        for snap in (before, after)
    )


def _legs(change: RowChange):
    """(staff_name, operation, before, after) per affected staff member."""
    if (
        change.operation == ChangeOperation.UPDATE
        and change.old("staff_name") != change.new("staff_name")
    ):
        return (
            (change.old("staff_name"), ChangeOperation.DELETE, change.before, None),
            (change.new("staff_name"), ChangeOperation.INSERT, None, change.after),
        )
    return ((change.current["staff_name"], change.operation, change.before, change.after),)


def _renewal_date(change: RowChange, tz: tzinfo) -> Optional[date]:
    flagged = False
    if change.operation == ChangeOperation.INSERT:
        flagged = bool(change.new("financial_year_end"))
    elif change.operation == ChangeOperation.UPDATE:
        flagged = not change.old("financial_year_end") and bool(change.new("financial_year_end"))
    if not flagged:
        return None
    return local_date(change.new("start"), tz)


def decide_shift_change(
    change: RowChange,
    lookup_staff: StaffLookup,
    *,
    holiday_type: str,
    tz: tzinfo,
) -> PolicyOutcome:
    decisions = []
    for staff_name, operation, before, after in _legs(change):
        staff = lookup_staff(staff_name)
        if staff is None:
            logger.info(f"Shift change for unknown staff '{staff_name}' skipped.")
            continue

        if staff.is_zero_hours:
            recompute, reason = True, "zero-hours shift change"
        elif _overtime_relevant(operation, before, after):
            recompute, reason = True, "overtime shift change"
        else:
            recompute, reason = False, ""
        usage = _touches_holiday(before, after, holiday_type)

        if recompute or usage:
            decisions.append(
                RecalculationDecision(
                    staff_id=staff.id,
                    staff_name=staff.name,
                    recompute=recompute,
                    refresh_usage=usage,
                    reason=reason or "holiday usage",
                )
            )

    return PolicyOutcome(
        decisions=tuple(decisions),
        renew_after=_renewal_date(change, tz),
    )


# ══════════════════════════════════════════════════════════════
# STAFF CHANGES
# ══════════════════════════════════════════════════════════════

def decide_staff_change(change: RowChange) -> PolicyOutcome:
    """Insert and qualifying updates recompute; deletes never do."""
    if change.operation == ChangeOperation.DELETE:
        return PolicyOutcome()

    changed = [name for name in _STAFF_TRIGGER_FIELDS if change.changed(name)]
    if not changed:
        return PolicyOutcome()

    override = change.overrides.get(
        "employment_end_date", change.new("employment_end_date")
    )
    return PolicyOutcome(
        decisions=(
            RecalculationDecision(
                staff_id=change.new("id"),
                staff_name=change.new("name"),
                recompute=True,
                employment_end_override=override,
                reason=f"staff {change.operation.lower()}: {', '.join(changed)}",
            ),
        )
    )


# ══════════════════════════════════════════════════════════════
# PRO-RATA ANCHOR
# ══════════════════════════════════════════════════════════════

def resolve_prorata_anchor(
    change_times: Iterable[datetime],
    year: AccrualYear,
    employment_start: Optional[date],
    tz: tzinfo,
) -> Optional[date]:
    """
    Start date for pro-rata math.

    `change_times` are contracted-hours change timestamps in ascending
    order; the first one falling inside the year wins. Without one, the
    employment start (not earlier than the year start) is used, and
    without that there is no anchor.
    """
    for changed_at in change_times:
        day = local_date(changed_at, tz)
        if year.window.contains(day):
            return day
        if day > year.end:
            break
    if employment_start is None:
        return None
    return max(employment_start, year.start)
