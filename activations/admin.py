"""
Django admin configuration for activations app.
"""

from django.contrib import admin
from django.utils.html import format_html

from activations.infrastructure.models import Activation


@admin.register(Activation)
class ActivationAdmin(admin.ModelAdmin):
    """Admin interface for Activation model."""

    list_display = [
        "license_key",
        "machine_display",
        "machine_name",
        "app_version",
        "is_live_display",
        "activated_at",
        "last_seen_at",
    ]
    list_filter = ["activated_at", "last_seen_at", "license_key__tier"]
    search_fields = ["machine_id", "machine_name", "license_key__key"]
    readonly_fields = [
        "id",
        "license_key",
        "machine_id",
        "machine_name",
        "app_version",
        "ip_address",
        "activated_at",
        "last_seen_at",
        "deactivated_at",
    ]

    def machine_display(self, obj):
        """Display machine id with truncation."""
        if len(obj.machine_id) > 16:
            return format_html(
                '<span title="{}">{}</span>',
                obj.machine_id,
                obj.machine_id[:13] + "...",
            )
        return obj.machine_id

    machine_display.short_description = "Machine"

    def is_live_display(self, obj):
        """Display binding status with color."""
        if obj.deactivated_at is None:
            return format_html('<span style="color: {}; font-weight: bold;">{}</span>', "green", "Bound")
        return format_html('<span style="color: {}; font-weight: bold;">{}</span>', "gray", "Released")

    is_live_display.short_description = "Status"

    def has_add_permission(self, request):
        """Bindings are created by activation only."""
        return False

    def get_queryset(self, request):
        """Optimize queryset."""
        return super().get_queryset(request).select_related("license_key")
