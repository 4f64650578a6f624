"""
Django admin configuration for licenses app.

Changes to keys go through the admin API so they are audited; the
Django admin is for inspection.
"""
from django.contrib import admin
from django.utils.html import format_html

from licenses.infrastructure.models import LicenseKey


@admin.register(LicenseKey)
class LicenseKeyAdmin(admin.ModelAdmin):
    """Admin interface for LicenseKey model."""

    list_display = [
        "key",
        "tier",
        "status_display",
        "duration_days",
        "live_activations",
        "expires_at",
        "created_at",
    ]
    list_filter = ["tier", "status", "duration_days", "created_at"]
    search_fields = ["key", "notes"]
    readonly_fields = [
        "id",
        "key",
        "tier",
        "status",
        "duration_days",
        "expires_at",
        "max_activations",
        "created_at",
        "updated_at",
    ]
    fieldsets = (
        (
            "Basic Information",
            {
                "fields": ("id", "key", "tier", "status", "notes"),
            },
        ),
        (
            "Plan",
            {
                "fields": ("duration_days", "expires_at", "max_activations"),
            },
        ),
        (
            "Timestamps",
            {
                "fields": ("created_at", "updated_at"),
                "classes": ("collapse",),
            },
        ),
    )

    def status_display(self, obj):
        """Display status with color coding."""
        colors = {
            "active": "green",
            "used": "blue",
            "revoked": "red",
            "expired": "gray",
        }
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            colors.get(obj.status, "black"),
            obj.status.upper(),
        )

    status_display.short_description = "Status"

    def live_activations(self, obj):
        """Display number of live activations."""
        return obj.activations.filter(deactivated_at__isnull=True).count()

    live_activations.short_description = "Bound"

    def has_add_permission(self, request):
        """Keys are issued through the admin API."""
        return False

    def has_delete_permission(self, request, obj=None):
        """Deletes go through the admin API so they are audited."""
        return False
