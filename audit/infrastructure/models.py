"""
AuditLogEntry Django ORM model.

This is the infrastructure layer model for the audit trail.
Domain entities are in audit.domain.entries.
"""
import uuid

from django.db import models
from django.utils import timezone


class AuditLogEntry(models.Model):
    """
    Append-only record of activation and admin actions.
    """

    ACTION_CHOICES = [
        ("activate", "Activate"),
        ("reactivate", "Reactivate"),
        ("admin_revoke", "Admin Revoke"),
        ("admin_reset", "Admin Reset"),
        ("admin_unbind", "Admin Unbind"),
        ("admin_upgrade", "Admin Upgrade"),
        ("admin_downgrade", "Admin Downgrade"),
        ("admin_delete", "Admin Delete"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    license_key = models.ForeignKey(
        "licenses.LicenseKey",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="audit_entries",
    )
    action = models.CharField(max_length=30, choices=ACTION_CHOICES)
    details = models.JSONField(default=dict, blank=True)
    machine_id = models.CharField(max_length=255, null=True, blank=True)
    ip_address = models.CharField(max_length=45, null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "license_audit_log"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["license_key", "created_at"], name="audit_key_created_idx"),
            models.Index(fields=["action"], name="audit_action_idx"),
            models.Index(fields=["created_at"], name="audit_created_idx"),
        ]

    def __str__(self):
        return f"{self.action} - {self.license_key_id}"
