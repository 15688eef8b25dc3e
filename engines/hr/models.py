"""
Rota HR Record Store - Models
=============================
Every row's primary key is a deterministic identifier derived from its
natural key (core.identity), assigned on first save. A shift edit that
touches its natural key moves the row to the new key
(engines.hr.service.update_shift); the other natural keys are not
editable.

Shifts reference staff by name, as the rota is planned by name.
"""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal
from typing import Any

from django.db import models

from core.identity.generator import (
    CHANGE_REQUEST_ENTITY,
    ENTITLEMENT_ENTITY,
    PERIOD_ENTITY,
    SHIFT_ENTITY,
    STAFF_ENTITY,
    change_request_id,
    entitlement_id,
    period_id,
    shift_id,
    staff_id,
)

CONTRACTED_HOURS_CHANGE = "contracted_hours_change"


class StaffRole(models.TextChoices):
    TEAM_LEADER = "team leader", "Team leader"
    STAFF_MEMBER = "staff member", "Staff member"


class DeterministicKeyMixin:
    """Assigns pk from natural_key_id() when the row has none yet."""

    identity_entity: str = ""

    def natural_key_id(self):
        raise NotImplementedError

    def assign_identity(self) -> None:
        if self.pk is None:
            self.pk = self.natural_key_id()

    def save(self, *args, **kwargs):
        self.assign_identity()
        super().save(*args, **kwargs)


class Staff(DeterministicKeyMixin, models.Model):
    identity_entity = STAFF_ENTITY

    id = models.UUIDField(primary_key=True, editable=False)
    name = models.CharField(max_length=255, unique=True, db_column="staff_name")
    role = models.CharField(
        max_length=20,
        choices=StaffRole.choices,
        default=StaffRole.STAFF_MEMBER,
    )
    is_active = models.BooleanField(default=True)
    contracted_hours = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    employment_start_date = models.DateField(null=True, blank=True)
    employment_end_date = models.DateField(null=True, blank=True)
    pay_rate = models.DecimalField(max_digits=6, decimal_places=2, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "rota_human_resource"
        ordering = ["name"]

    def natural_key_id(self):
        return staff_id(self.name)

    @property
    def is_zero_hours(self) -> bool:
        return not self.contracted_hours

    def snapshot(self) -> dict[str, Any]:
        return {
            "id": self.pk,
            "name": self.name,
            "is_active": self.is_active,
            "contracted_hours": self.contracted_hours,
            "employment_start_date": self.employment_start_date,
            "employment_end_date": self.employment_end_date,
        }

    def __str__(self) -> str:
        return f"{self.name} ({self.id})"


class Period(DeterministicKeyMixin, models.Model):
    identity_entity = PERIOD_ENTITY

    id = models.UUIDField(primary_key=True, editable=False)
    name = models.CharField(max_length=255)
    start_date = models.DateField()
    end_date = models.DateField()
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "rota_period"
        ordering = ["start_date", "name"]
        constraints = [
            models.UniqueConstraint(fields=["name", "start_date"], name="uq_period_name_start"),
            models.CheckConstraint(
                condition=models.Q(end_date__gte=models.F("start_date")),
                name="ck_period_valid_range",
            ),
        ]

    def natural_key_id(self):
        return period_id(self.name, self.start_date)

    def __str__(self) -> str:
        return f"{self.name} ({self.start_date} → {self.end_date})"


class Shift(DeterministicKeyMixin, models.Model):
    identity_entity = SHIFT_ENTITY

    id = models.UUIDField(primary_key=True, editable=False)
    period = models.ForeignKey(
        Period,
        on_delete=models.CASCADE,
        related_name="shifts",
        db_column="period_id",
    )
    week_number = models.PositiveSmallIntegerField(default=1)
    staff_name = models.CharField(max_length=255, db_index=True)
    start = models.DateTimeField(db_column="shift_start_datetime")
    end = models.DateTimeField(db_column="shift_end_datetime")
    shift_type = models.CharField(max_length=50)
    overtime = models.BooleanField(default=False)
    financial_year_end = models.BooleanField(default=False)
    notes = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "rota_shift"
        ordering = ["start", "staff_name"]
        indexes = [
            models.Index(fields=["staff_name", "start"], name="idx_shift_staff_start"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(week_number__gte=1) & models.Q(week_number__lte=53),
                name="ck_shift_week_number",
            ),
        ]

    def natural_key_id(self):
        return shift_id(self.period_id, self.staff_name, self.start, self.shift_type)

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def snapshot(self) -> dict[str, Any]:
        return {
            "id": self.pk,
            "period_id": self.period_id,
            "staff_name": self.staff_name,
            "start": self.start,
            "end": self.end,
            "shift_type": self.shift_type,
            "overtime": self.overtime,
            "financial_year_end": self.financial_year_end,
        }

    def __str__(self) -> str:
        return f"{self.staff_name} {self.shift_type} @ {self.start}"


class ChangeRequest(DeterministicKeyMixin, models.Model):
    identity_entity = CHANGE_REQUEST_ENTITY

    id = models.UUIDField(primary_key=True, editable=False)
    staff = models.ForeignKey(
        Staff,
        on_delete=models.CASCADE,
        related_name="change_requests",
        db_column="staff_id",
    )
    staff_name = models.CharField(max_length=255)
    change_type = models.CharField(max_length=100)
    field_name = models.CharField(max_length=100, null=True, blank=True)
    old_value = models.TextField(null=True, blank=True)
    new_value = models.TextField(null=True, blank=True)
    effective_from = models.DateTimeField(null=True, blank=True)
    changed_at = models.DateTimeField()
    changed_by = models.CharField(max_length=255, default="system")
    reason = models.TextField(null=True, blank=True)

    class Meta:
        db_table = "rota_change_request"
        ordering = ["changed_at"]
        indexes = [
            models.Index(
                fields=["staff", "change_type", "changed_at"],
                name="idx_change_staff_type_at",
            ),
        ]

    def natural_key_id(self):
        return change_request_id(self.staff_id, self.change_type, self.field_name, self.changed_at)

    def __str__(self) -> str:
        return f"{self.staff_name}:{self.change_type}@{self.changed_at}"


class HolidayEntitlement(DeterministicKeyMixin, models.Model):
    identity_entity = ENTITLEMENT_ENTITY

    id = models.UUIDField(primary_key=True, editable=False)
    staff = models.ForeignKey(
        Staff,
        on_delete=models.CASCADE,
        related_name="entitlements",
        db_column="staff_id",
    )
    staff_name = models.CharField(max_length=255)
    holiday_year_start = models.DateField()
    holiday_year_end = models.DateField()
    contracted_hours_per_week = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal("0"))
    entitlement_days = models.DecimalField(max_digits=14, decimal_places=6)
    entitlement_hours = models.DecimalField(max_digits=14, decimal_places=6)
    days_taken = models.DecimalField(max_digits=8, decimal_places=2, default=Decimal("0"))
    hours_taken = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0"))
    is_zero_hours = models.BooleanField(default=False)
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField()

    class Meta:
        db_table = "rota_holiday_entitlements"
        ordering = ["staff_name", "holiday_year_start"]
        constraints = [
            models.UniqueConstraint(
                fields=["staff", "holiday_year_start"],
                name="uq_entitlement_staff_year",
            ),
            models.CheckConstraint(
                condition=models.Q(holiday_year_end__gt=models.F("holiday_year_start")),
                name="ck_entitlement_valid_year",
            ),
            models.CheckConstraint(
                condition=models.Q(entitlement_days__gte=0) & models.Q(entitlement_hours__gte=0),
                name="ck_entitlement_non_negative",
            ),
        ]

    def natural_key_id(self):
        return entitlement_id(self.staff_id, self.holiday_year_start)

    @property
    def days_remaining(self) -> Decimal:
        return self.entitlement_days - self.days_taken

    @property
    def hours_remaining(self) -> Decimal:
        return self.entitlement_hours - self.hours_taken

    def __str__(self) -> str:
        return f"{self.staff_name} {self.holiday_year_start}: {self.entitlement_days}d"
