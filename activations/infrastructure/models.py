"""
Activation Django ORM model.

This is the infrastructure layer model for activations.
Domain entities are in activations.domain.activation.
"""
import uuid

from django.db import models
from django.utils import timezone


class Activation(models.Model):
    """
    Binds a license key to a machine.
    A row with no deactivated_at is the key's live binding.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    license_key = models.ForeignKey(
        "licenses.LicenseKey",
        on_delete=models.CASCADE,
        related_name="activations",
    )
    machine_id = models.CharField(max_length=255)
    machine_name = models.CharField(max_length=255, default="Unknown")
    app_version = models.CharField(max_length=50, default="Unknown")
    ip_address = models.CharField(max_length=45, null=True, blank=True)
    activated_at = models.DateTimeField(default=timezone.now)
    last_seen_at = models.DateTimeField(default=timezone.now)
    deactivated_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "license_activations"
        ordering = ["-activated_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["license_key"],
                condition=models.Q(deactivated_at__isnull=True),
                name="one_live_activation_per_key",
            ),
        ]
        indexes = [
            models.Index(fields=["license_key", "machine_id"], name="activations_key_machine_idx"),
            models.Index(fields=["deactivated_at"], name="activations_deactivated_idx"),
        ]

    def __str__(self):
        return f"{self.license_key.key} @ {self.machine_id}"
