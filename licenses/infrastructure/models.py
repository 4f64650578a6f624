"""
LicenseKey Django ORM model.

This is the infrastructure layer model for license keys.
Domain entities are in licenses.domain.license_key.
"""
import uuid

from django.db import models
from django.utils import timezone


class LicenseKey(models.Model):
    """
    A signed key issued to a customer.
    Bound to at most one machine at a time through its activations.
    """

    TIER_CHOICES = [
        ("pro", "Pro"),
        ("enterprise", "Enterprise"),
    ]

    STATUS_CHOICES = [
        ("active", "Active"),
        ("used", "Used"),
        ("revoked", "Revoked"),
        ("expired", "Expired"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    key = models.CharField(max_length=19, unique=True)
    tier = models.CharField(max_length=20, choices=TIER_CHOICES)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="active")
    duration_days = models.PositiveIntegerField(default=0, help_text="0 means lifetime")
    expires_at = models.DateTimeField(
        null=True, blank=True, help_text="Set by admin upgrade/downgrade"
    )
    max_activations = models.PositiveIntegerField(default=1)
    notes = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "license_keys"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="license_keys_status_idx"),
            models.Index(fields=["tier"], name="license_keys_tier_idx"),
        ]

    def __str__(self):
        return self.key
