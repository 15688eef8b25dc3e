from decimal import Decimal

from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Staff",
            fields=[
                ("id", models.UUIDField(editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(db_column="staff_name", max_length=255, unique=True)),
                (
                    "role",
                    models.CharField(
                        choices=[
                            ("team leader", "Team leader"),
                            ("staff member", "Staff member"),
                        ],
                        default="staff member",
                        max_length=20,
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                (
                    "contracted_hours",
                    models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True),
                ),
                ("employment_start_date", models.DateField(blank=True, null=True)),
                ("employment_end_date", models.DateField(blank=True, null=True)),
                (
                    "pay_rate",
                    models.DecimalField(blank=True, decimal_places=2, max_digits=6, null=True),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "rota_human_resource",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Period",
            fields=[
                ("id", models.UUIDField(editable=False, primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("start_date", models.DateField()),
                ("end_date", models.DateField()),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "rota_period",
                "ordering": ["start_date", "name"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("name", "start_date"),
                        name="uq_period_name_start",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(end_date__gte=models.F("start_date")),
                        name="ck_period_valid_range",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Shift",
            fields=[
                ("id", models.UUIDField(editable=False, primary_key=True, serialize=False)),
                ("week_number", models.PositiveSmallIntegerField(default=1)),
                ("staff_name", models.CharField(db_index=True, max_length=255)),
                ("start", models.DateTimeField(db_column="shift_start_datetime")),
                ("end", models.DateTimeField(db_column="shift_end_datetime")),
                ("shift_type", models.CharField(max_length=50)),
                ("overtime", models.BooleanField(default=False)),
                ("financial_year_end", models.BooleanField(default=False)),
                ("notes", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "period",
                    models.ForeignKey(
                        db_column="period_id",
                        on_delete=models.deletion.CASCADE,
                        related_name="shifts",
                        to="hr.period",
                    ),
                ),
            ],
            options={
                "db_table": "rota_shift",
                "ordering": ["start", "staff_name"],
                "indexes": [
                    models.Index(fields=["staff_name", "start"], name="idx_shift_staff_start"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(week_number__gte=1) & models.Q(week_number__lte=53),
                        name="ck_shift_week_number",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ChangeRequest",
            fields=[
                ("id", models.UUIDField(editable=False, primary_key=True, serialize=False)),
                ("staff_name", models.CharField(max_length=255)),
                ("change_type", models.CharField(max_length=100)),
                ("field_name", models.CharField(blank=True, max_length=100, null=True)),
                ("old_value", models.TextField(blank=True, null=True)),
                ("new_value", models.TextField(blank=True, null=True)),
                ("effective_from", models.DateTimeField(blank=True, null=True)),
                ("changed_at", models.DateTimeField()),
                ("changed_by", models.CharField(default="system", max_length=255)),
                ("reason", models.TextField(blank=True, null=True)),
                (
                    "staff",
                    models.ForeignKey(
                        db_column="staff_id",
                        on_delete=models.deletion.CASCADE,
                        related_name="change_requests",
                        to="hr.staff",
                    ),
                ),
            ],
            options={
                "db_table": "rota_change_request",
                "ordering": ["changed_at"],
                "indexes": [
                    models.Index(
                        fields=["staff", "change_type", "changed_at"],
                        name="idx_change_staff_type_at",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="HolidayEntitlement",
            fields=[
                ("id", models.UUIDField(editable=False, primary_key=True, serialize=False)),
                ("staff_name", models.CharField(max_length=255)),
                ("holiday_year_start", models.DateField()),
                ("holiday_year_end", models.DateField()),
                (
                    "contracted_hours_per_week",
                    models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=5),
                ),
                ("entitlement_days", models.DecimalField(decimal_places=6, max_digits=14)),
                ("entitlement_hours", models.DecimalField(decimal_places=6, max_digits=14)),
                (
                    "days_taken",
                    models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=8),
                ),
                (
                    "hours_taken",
                    models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=10),
                ),
                ("is_zero_hours", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField()),
                ("updated_at", models.DateTimeField()),
                (
                    "staff",
                    models.ForeignKey(
                        db_column="staff_id",
                        on_delete=models.deletion.CASCADE,
                        related_name="entitlements",
                        to="hr.staff",
                    ),
                ),
            ],
            options={
                "db_table": "rota_holiday_entitlements",
                "ordering": ["staff_name", "holiday_year_start"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("staff", "holiday_year_start"),
                        name="uq_entitlement_staff_year",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(holiday_year_end__gt=models.F("holiday_year_start")),
                        name="ck_entitlement_valid_year",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(entitlement_days__gte=0)
                        & models.Q(entitlement_hours__gte=0),
                        name="ck_entitlement_non_negative",
                    ),
                ],
            },
        ),
    ]
