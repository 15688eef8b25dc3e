"""
Rota HR Record Store - Write Service
====================================
The transactional entry points for HR writes. Each function runs in one
transaction, so the entitlement recompute triggered by the change hooks
commits or rolls back together with the write.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from django.db import transaction

from core.time.clock import Clock, get_default_clock
from engines.hr.models import (
    CONTRACTED_HOURS_CHANGE,
    ChangeRequest,
    Period,
    Shift,
    Staff,
    StaffRole,
)
from engines.hr.signals import attach_overrides, muted_changes, publish_update

logger = logging.getLogger("rota.hr")

STAFF_UPDATABLE_FIELDS = frozenset({
    "role",
    "is_active",
    "contracted_hours",
    "employment_start_date",
    "employment_end_date",
    "pay_rate",
})

_DATE_FIELDS = ("employment_start_date", "employment_end_date")

SHIFT_UPDATABLE_FIELDS = frozenset({
    "staff_name",
    "start",
    "end",
    "shift_type",
    "week_number",
    "overtime",
    "financial_year_end",
    "notes",
})


def _as_decimal(value: Any, *, field_name: str) -> Optional[Decimal]:
    if value is None:
        return None
    try:
        result = Decimal(str(value))
    except ArithmeticError as exc:
        raise ValueError(f"{field_name} must be numeric, got {value!r}.") from exc
    if result < 0:
        raise ValueError(f"{field_name} must be >= 0.")
    return result


def _as_date(value: Any, *, field_name: str) -> Optional[date]:
    if value is None or (isinstance(value, date) and not isinstance(value, datetime)):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError as exc:
            raise ValueError(f"{field_name} must be YYYY-MM-DD, got {value!r}.") from exc
    raise ValueError(f"{field_name} must be a date, got {value!r}.")


def _clean_name(value: Any, *, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{field_name} must be a non-empty string.")
    return value.strip()


def _reject_unknown(changes: dict, allowed: frozenset, entity: str) -> None:
    unknown = set(changes) - allowed
    if unknown:
        raise ValueError(f"{entity} fields not updatable: {sorted(unknown)}")


# ══════════════════════════════════════════════════════════════
# STAFF
# ══════════════════════════════════════════════════════════════

@transaction.atomic
def create_staff(
    *,
    name: str,
    contracted_hours: Any = None,
    employment_start_date: Optional[date] = None,
    employment_end_date: Optional[date] = None,
    role: str = StaffRole.STAFF_MEMBER,
    pay_rate: Any = None,
    is_active: bool = True,
) -> Staff:
    return Staff.objects.create(
        name=_clean_name(name, field_name="name"),
        role=role,
        is_active=is_active,
        contracted_hours=_as_decimal(contracted_hours, field_name="contracted_hours"),
        employment_start_date=_as_date(employment_start_date, field_name="employment_start_date"),
        employment_end_date=_as_date(employment_end_date, field_name="employment_end_date"),
        pay_rate=_as_decimal(pay_rate, field_name="pay_rate"),
    )


@transaction.atomic
def update_staff(staff_id: uuid.UUID | str, **changes: Any) -> Staff:
    """
    Apply field changes to a staff row.

    When employment_end_date is among the changes it is also published
    as the override for the entitlement recompute.
    """
    _reject_unknown(changes, STAFF_UPDATABLE_FIELDS, "Staff")
    staff = Staff.objects.select_for_update().get(pk=staff_id)
    for field_name, value in changes.items():
        if field_name in ("contracted_hours", "pay_rate"):
            value = _as_decimal(value, field_name=field_name)
        elif field_name in _DATE_FIELDS:
            value = _as_date(value, field_name=field_name)
        setattr(staff, field_name, value)
    if "employment_end_date" in changes:
        attach_overrides(staff, employment_end_date=staff.employment_end_date)
    staff.save()
    return staff


@transaction.atomic
def change_contracted_hours(
    staff_id: uuid.UUID | str,
    new_hours: Any,
    *,
    changed_by: str = "system",
    reason: Optional[str] = None,
    effective_from: Optional[datetime] = None,
    clock: Clock | None = None,
) -> ChangeRequest:
    """
    Record a contracted-hours change request and apply it.

    The request row is written before the staff row so the recompute
    triggered by the staff update sees it as the pro-rata anchor.

    Raises:
        ValueError: The new hours equal the current hours.
    """
    staff = Staff.objects.select_for_update().get(pk=staff_id)
    hours = _as_decimal(new_hours, field_name="contracted_hours")
    if hours == staff.contracted_hours:
        raise ValueError(
            f"Contracted hours for {staff.name} are already {staff.contracted_hours}."
        )
    changed_at = (clock or get_default_clock()).now_utc()

    request = ChangeRequest.objects.create(
        staff=staff,
        staff_name=staff.name,
        change_type=CONTRACTED_HOURS_CHANGE,
        field_name="contracted_hours",
        old_value=None if staff.contracted_hours is None else str(staff.contracted_hours),
        new_value=None if hours is None else str(hours),
        effective_from=effective_from or changed_at,
        changed_at=changed_at,
        changed_by=changed_by,
        reason=reason,
    )

    staff.contracted_hours = hours
    staff.save()
    logger.info(
        f"Contracted hours for {staff.name}: {request.old_value} -> {request.new_value}"
    )
    return request


@transaction.atomic
def delete_change_request(change_request_id: uuid.UUID | str) -> None:
    """
    Withdraw a change request and revert the staff row to its old value.
    The revert is an ordinary staff update and re-triggers recomputation.
    """
    request = ChangeRequest.objects.select_related("staff").get(pk=change_request_id)
    staff = Staff.objects.select_for_update().get(pk=request.staff_id)
    request.delete()
    if request.field_name == "contracted_hours":
        staff.contracted_hours = _as_decimal(request.old_value, field_name="contracted_hours")
        staff.save()


@transaction.atomic
def delete_staff(staff_id: uuid.UUID | str) -> None:
    """Remove a staff member with their shifts, requests and entitlements."""
    staff = Staff.objects.select_for_update().get(pk=staff_id)
    with muted_changes():
        Shift.objects.filter(staff_name=staff.name).delete()
        staff.delete()
    logger.info(f"Staff removed: {staff.name}")


# ══════════════════════════════════════════════════════════════
# PERIODS & SHIFTS
# ══════════════════════════════════════════════════════════════

@transaction.atomic
def create_period(*, name: str, start_date: date, end_date: date, is_active: bool = True) -> Period:
    if end_date < start_date:
        raise ValueError(f"Period end {end_date} is before start {start_date}.")
    return Period.objects.create(
        name=_clean_name(name, field_name="name"),
        start_date=start_date,
        end_date=end_date,
        is_active=is_active,
    )


@transaction.atomic
def save_shift(
    *,
    period: Period,
    staff_name: str,
    start: datetime,
    end: datetime,
    shift_type: str,
    week_number: int = 1,
    overtime: bool = False,
    financial_year_end: bool = False,
    notes: Optional[str] = None,
) -> Shift:
    if end < start:
        raise ValueError(f"Shift end {end} is before start {start}.")
    return Shift.objects.create(
        period=period,
        staff_name=_clean_name(staff_name, field_name="staff_name"),
        start=start,
        end=end,
        shift_type=_clean_name(shift_type, field_name="shift_type"),
        week_number=week_number,
        overtime=overtime,
        financial_year_end=financial_year_end,
        notes=notes,
    )


@transaction.atomic
def update_shift(shift_id: uuid.UUID | str, **changes: Any) -> Shift:
    """
    Edit a shift.

    When the edit touches the natural key (period, staff name, start, type)
    the row moves to the identifier of the new key, so the stored key is
    always the one a replica would compute. The move is published as one
    UPDATE.

    Raises:
        ValueError: Unknown field, inverted times, or another shift already
                    holds the new natural key.
    """
    _reject_unknown(changes, SHIFT_UPDATABLE_FIELDS, "Shift")
    shift = Shift.objects.select_for_update().get(pk=shift_id)
    before = shift.snapshot()
    for field_name, value in changes.items():
        if field_name in ("staff_name", "shift_type"):
            value = _clean_name(value, field_name=field_name)
        setattr(shift, field_name, value)
    if shift.end < shift.start:
        raise ValueError(f"Shift end {shift.end} is before start {shift.start}.")

    new_id = shift.natural_key_id()
    if new_id == shift.pk:
        shift.save()
        return shift

    if Shift.objects.filter(pk=new_id).exists():
        raise ValueError(
            f"A {shift.shift_type} shift for {shift.staff_name} "
            f"already starts at {shift.start}."
        )
    old_id = shift.pk
    with muted_changes():
        Shift.objects.filter(pk=old_id).delete()
        shift.pk = new_id
        shift.save(force_insert=True)
    publish_update(Shift, before, shift.snapshot())
    logger.info(f"Shift rekeyed: {old_id} -> {new_id}")
    return shift


@transaction.atomic
def delete_shift(shift_id: uuid.UUID | str) -> None:
    Shift.objects.get(pk=shift_id).delete()
