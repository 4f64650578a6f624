import uuid

import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="LicenseKey",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("key", models.CharField(max_length=19, unique=True)),
                ("tier", models.CharField(choices=[("pro", "Pro"), ("enterprise", "Enterprise")], max_length=20)),
                (
                    "status",
                    models.CharField(
                        choices=[("active", "Active"), ("used", "Used"), ("revoked", "Revoked"), ("expired", "Expired")],
                        default="active",
                        max_length=20,
                    ),
                ),
                ("duration_days", models.PositiveIntegerField(default=0, help_text="0 means lifetime")),
                ("expires_at", models.DateTimeField(blank=True, help_text="Set by admin upgrade/downgrade", null=True)),
                ("max_activations", models.PositiveIntegerField(default=1)),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(default=django.utils.timezone.now)),
            ],
            options={
                "db_table": "license_keys",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status"], name="license_keys_status_idx"),
                    models.Index(fields=["tier"], name="license_keys_tier_idx"),
                ],
            },
        ),
    ]
