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
            name="AuditLogEntry",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "action",
                    models.CharField(
                        choices=[
                            ("activate", "Activate"),
                            ("reactivate", "Reactivate"),
                            ("admin_revoke", "Admin Revoke"),
                            ("admin_reset", "Admin Reset"),
                            ("admin_unbind", "Admin Unbind"),
                            ("admin_upgrade", "Admin Upgrade"),
                            ("admin_downgrade", "Admin Downgrade"),
                            ("admin_delete", "Admin Delete"),
                        ],
                        max_length=30,
                    ),
                ),
                ("details", models.JSONField(blank=True, default=dict)),
                ("machine_id", models.CharField(blank=True, max_length=255, null=True)),
                ("ip_address", models.CharField(blank=True, max_length=45, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "license_key",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="audit_entries",
                        to="licenses.licensekey",
                    ),
                ),
            ],
            options={
                "db_table": "license_audit_log",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["license_key", "created_at"], name="audit_key_created_idx"),
                    models.Index(fields=["action"], name="audit_action_idx"),
                    models.Index(fields=["created_at"], name="audit_created_idx"),
                ],
            },
        ),
    ]
