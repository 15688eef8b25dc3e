"""
Rota Holiday Engine — Entitlement Store Upserter
==================================================
Race-safe, idempotent write of the per-(staff, year) entitlement row.

Write path (one transaction):
1. Lock the staff row (writers for one staff member serialise here)
2. Update the row matching (staff, year start, year end)
3. No match → insert with pk = entitlement_id(staff, year start)
4. Insert key conflict (unique or pk) → ConcurrencyConflict → retry as
   an update of the row keyed by the deterministic id
5. Retries exhausted → ConcurrencyConflict surfaces
6. Any other integrity failure (CHECK etc.) → EntitlementRejected

A write that would not change any stored value is skipped, so the row
(updated_at included) stays bit-identical. Days/hours taken are owned
by record_usage() and never touched by upsert().
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_EVEN, Decimal
from typing import Optional

from django.db import IntegrityError, transaction

from core.identity.generator import entitlement_id
from core.time.clock import Clock, get_default_clock
from engines.hr.models import HolidayEntitlement, Staff
from engines.holiday.errors import ConcurrencyConflict, EntitlementRejected, StaffNotFound

logger = logging.getLogger("rota.holiday")

DEFAULT_MAX_ATTEMPTS = 3

# Constraints whose violation means another writer got the key first
_KEY_CONSTRAINTS = frozenset({
    "uq_entitlement_staff_year",
    "rota_holiday_entitlements_pkey",
})

# Column precision of rota_holiday_entitlements
_ENTITLEMENT_QUANTUM = Decimal("0.000001")
_HOURS_QUANTUM = Decimal("0.01")


def _quantize(value: Decimal, quantum: Decimal) -> Decimal:
    return Decimal(value).quantize(quantum, rounding=ROUND_HALF_EVEN)


def _extract_constraint_name(exc: IntegrityError) -> str | None:
    cause = getattr(exc, "__cause__", None)
    diag = getattr(cause, "diag", None)
    constraint_name = getattr(diag, "constraint_name", None)
    if isinstance(constraint_name, str) and constraint_name:
        return constraint_name
    return None


def _is_key_conflict(exc: IntegrityError) -> bool:
    """True for unique / primary-key violations, False for CHECK and the like."""
    constraint_name = _extract_constraint_name(exc)
    if constraint_name is not None:
        return constraint_name in _KEY_CONSTRAINTS
    message = str(exc)
    return "UNIQUE constraint failed" in message or "duplicate key" in message


@dataclass(frozen=True)
class EntitlementValues:
    """Computed entitlement for one staff member and accrual year."""

    staff_id: uuid.UUID
    staff_name: str
    year_start: date
    year_end: date
    contracted_hours: Decimal
    entitlement_days: Decimal
    entitlement_hours: Decimal
    is_zero_hours: bool

    @property
    def entitlement_id(self) -> uuid.UUID:
        return entitlement_id(self.staff_id, self.year_start)

    def stored_fields(self) -> dict:
        """Column values as persisted."""
        return {
            "staff_name": self.staff_name,
            "holiday_year_end": self.year_end,
            "contracted_hours_per_week": _quantize(self.contracted_hours, _HOURS_QUANTUM),
            "entitlement_days": _quantize(self.entitlement_days, _ENTITLEMENT_QUANTUM),
            "entitlement_hours": _quantize(self.entitlement_hours, _ENTITLEMENT_QUANTUM),
            "is_zero_hours": self.is_zero_hours,
        }


@dataclass(frozen=True)
class UpsertResult:
    entitlement_id: uuid.UUID
    created: bool = False
    changed: bool = False
    attempts: int = 1
    fields: tuple[str, ...] = field(default_factory=tuple)


class DjangoEntitlementUpserter:
    """
    Args:
        clock:        Source of created_at/updated_at.
        max_attempts: Write attempts before ConcurrencyConflict surfaces.
    """

    def __init__(
        self,
        *,
        clock: Clock | None = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1.")
        self._clock = clock
        self._max_attempts = max_attempts

    def _now(self):
        return (self._clock or get_default_clock()).now_utc()

    @transaction.atomic
    def lock_staff(self, staff_id: uuid.UUID) -> None:
        """Row-lock the staff member for the rest of the enclosing transaction."""
        locked = list(
            Staff.objects.select_for_update()
            .filter(pk=staff_id)
            .values_list("pk", flat=True)
        )
        if not locked:
            raise StaffNotFound(staff_id)

    # ── rows ─────────────────────────────────────────────────

    def _apply(self, row: HolidayEntitlement, values: EntitlementValues) -> tuple[str, ...]:
        dirty = []
        for name, value in values.stored_fields().items():
            if getattr(row, name) != value:
                setattr(row, name, value)
                dirty.append(name)
        if dirty:
            row.updated_at = self._now()
            try:
                with transaction.atomic():
                    row.save(update_fields=[*dirty, "updated_at"])
            except IntegrityError as exc:
                raise EntitlementRejected(row.pk, str(exc)) from exc
        return tuple(dirty)

    def _insert(self, values: EntitlementValues) -> HolidayEntitlement:
        now = self._now()
        try:
            with transaction.atomic():
                return HolidayEntitlement.objects.create(
                    id=values.entitlement_id,
                    staff_id=values.staff_id,
                    holiday_year_start=values.year_start,
                    created_at=now,
                    updated_at=now,
                    **values.stored_fields(),
                )
        except IntegrityError as exc:
            if not _is_key_conflict(exc):
                raise EntitlementRejected(values.entitlement_id, str(exc)) from exc
            raise ConcurrencyConflict(values.entitlement_id, str(exc)) from exc

    def _update_by_id(self, values: EntitlementValues) -> Optional[HolidayEntitlement]:
        row = HolidayEntitlement.objects.filter(pk=values.entitlement_id).first()
        if row is None:
            # Rows keyed under another scheme still satisfy the unique pair
            row = HolidayEntitlement.objects.filter(
                staff_id=values.staff_id,
                holiday_year_start=values.year_start,
            ).first()
        return row

    # ── public ───────────────────────────────────────────────

    @transaction.atomic
    def upsert(self, values: EntitlementValues) -> UpsertResult:
        """
        Raises:
            StaffNotFound:       The staff row is gone.
            ConcurrencyConflict: Key races outlasted max_attempts.
            EntitlementRejected: The row breaks a store constraint.
        """
        if values.year_end <= values.year_start:
            raise EntitlementRejected(
                values.entitlement_id,
                f"year end {values.year_end} must follow year start {values.year_start}.",
            )
        self.lock_staff(values.staff_id)

        conflict: Optional[ConcurrencyConflict] = None
        for attempt in range(1, self._max_attempts + 1):
            if conflict is None:
                row = HolidayEntitlement.objects.filter(
                    staff_id=values.staff_id,
                    holiday_year_start=values.year_start,
                    holiday_year_end=values.year_end,
                ).first()
            else:
                row = self._update_by_id(values)

            if row is not None:
                dirty = self._apply(row, values)
                if dirty:
                    logger.info(
                        f"Entitlement updated for {values.staff_name} "
                        f"{values.year_start}: {', '.join(dirty)}"
                    )
                return UpsertResult(
                    entitlement_id=row.pk,
                    changed=bool(dirty),
                    attempts=attempt,
                    fields=dirty,
                )

            try:
                row = self._insert(values)
            except ConcurrencyConflict as exc:
                conflict = exc
                logger.warning(
                    f"Entitlement insert conflict for {values.staff_name} "
                    f"{values.year_start} (attempt {attempt}/{self._max_attempts})"
                )
                continue

            logger.info(
                f"Entitlement created for {values.staff_name} "
                f"{values.year_start}→{values.year_end}: {values.entitlement_days}d"
            )
            return UpsertResult(
                entitlement_id=row.pk,
                created=True,
                changed=True,
                attempts=attempt,
                fields=tuple(values.stored_fields()),
            )

        raise conflict

    @transaction.atomic
    def record_usage(
        self,
        staff_id: uuid.UUID,
        year_start: date,
        *,
        days_taken: Decimal,
        hours_taken: Decimal,
    ) -> bool:
        """
        Store days/hours taken on an existing row.
        Returns True when a row changed; absent rows are left absent.
        """
        self.lock_staff(staff_id)
        row = HolidayEntitlement.objects.filter(
            staff_id=staff_id,
            holiday_year_start=year_start,
        ).first()
        if row is None:
            return False

        days = _quantize(days_taken, _HOURS_QUANTUM)
        hours = _quantize(hours_taken, _HOURS_QUANTUM)
        if row.days_taken == days and row.hours_taken == hours:
            return False
        row.days_taken = days
        row.hours_taken = hours
        row.updated_at = self._now()
        row.save(update_fields=["days_taken", "hours_taken", "updated_at"])
        return True

    def year_has_rows(self, year_start: date) -> bool:
        return HolidayEntitlement.objects.filter(holiday_year_start=year_start).exists()
