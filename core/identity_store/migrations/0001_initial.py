from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="NamespacePin",
            fields=[
                (
                    "slot",
                    models.PositiveSmallIntegerField(
                        default=1, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("version", models.PositiveIntegerField()),
                ("namespace", models.UUIDField()),
                ("previous_version", models.PositiveIntegerField(blank=True, null=True)),
                ("previous_namespace", models.UUIDField(blank=True, null=True)),
                ("pinned_at", models.DateTimeField()),
            ],
            options={
                "db_table": "rota_identity_namespace_pin",
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(slot=1),
                        name="ck_namespace_pin_single_row",
                    ),
                ],
            },
        ),
    ]
