"""
Django admin configuration for audit app.
"""
import json

from django.contrib import admin
from django.utils.html import format_html

from audit.infrastructure.models import AuditLogEntry


@admin.register(AuditLogEntry)
class AuditLogEntryAdmin(admin.ModelAdmin):
    """Admin interface for AuditLogEntry model."""

    list_display = [
        "action",
        "license_key",
        "machine_id",
        "ip_address",
        "created_at",
    ]
    list_filter = ["action", "created_at"]
    search_fields = ["machine_id", "license_key__key"]
    readonly_fields = ["id", "created_at", "details_display"]
    exclude = ["details"]

    def details_display(self, obj):
        """Display details in a formatted way."""
        if obj.details:
            return format_html(
                '<pre style="background: #f5f5f5; padding: 10px; '
                'border-radius: 4px; overflow-x: auto;">{}</pre>',
                json.dumps(obj.details, indent=2),
            )
        return "-"

    details_display.short_description = "Details"

    def has_add_permission(self, request):
        """Audit logs are read-only."""
        return False

    def has_change_permission(self, request, obj=None):
        """Audit logs are read-only."""
        return False

    def has_delete_permission(self, request, obj=None):
        """Audit logs should not be deleted."""
        return False

    def get_queryset(self, request):
        """Optimize queryset."""
        return super().get_queryset(request).select_related("license_key")
