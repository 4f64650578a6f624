import uuid

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("licenses", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Activation",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("machine_id", models.CharField(max_length=255)),
                ("machine_name", models.CharField(default="Unknown", max_length=255)),
                ("app_version", models.CharField(default="Unknown", max_length=50)),
                ("ip_address", models.CharField(blank=True, max_length=45, null=True)),
                ("activated_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("last_seen_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("deactivated_at", models.DateTimeField(blank=True, null=True)),
                (
                    "license_key",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="activations",
                        to="licenses.licensekey",
                    ),
                ),
            ],
            options={
                "db_table": "license_activations",
                "ordering": ["-activated_at"],
                "indexes": [
                    models.Index(fields=["license_key", "machine_id"], name="activations_key_machine_idx"),
                    models.Index(fields=["deactivated_at"], name="activations_deactivated_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(deactivated_at__isnull=True),
                        fields=("license_key",),
                        name="one_live_activation_per_key",
                    ),
                ],
            },
        ),
    ]
