"""
Serializers for admin API endpoints.
"""

from rest_framework import serializers

from audit.domain.entries import AuditAction
from core.domain.value_objects import LicenseTier

TIER_CHOICES = [tier.value for tier in LicenseTier]


class GenerateKeysRequestSerializer(serializers.Serializer):
    """Serializer for generate keys request."""

    tier = serializers.ChoiceField(choices=TIER_CHOICES, default=LicenseTier.PRO.value)
    count = serializers.IntegerField(default=1)
    duration_days = serializers.IntegerField(min_value=0, default=0)
    max_activations = serializers.IntegerField(min_value=1, default=1)
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class ManageKeyRequestSerializer(serializers.Serializer):
    """Serializer for the optional admin action payload."""

    tier = serializers.ChoiceField(choices=TIER_CHOICES, required=False)
    duration_days = serializers.IntegerField(min_value=0, required=False)
    max_activations = serializers.IntegerField(min_value=1, required=False)


class AuditLogQuerySerializer(serializers.Serializer):
    """Serializer for audit log filters."""

    key_id = serializers.UUIDField(required=False)
    action = serializers.ChoiceField(
        choices=[action.value for action in AuditAction], required=False
    )
    limit = serializers.IntegerField(required=False)


class LicenseKeySerializer(serializers.Serializer):
    """Serializer for LicenseKeyDTO."""

    id = serializers.UUIDField()
    key = serializers.CharField()
    tier = serializers.CharField()
    status = serializers.CharField()
    duration_days = serializers.IntegerField()
    expires_at = serializers.DateTimeField(allow_null=True)
    max_activations = serializers.IntegerField()
    notes = serializers.CharField(allow_blank=True)
    created_at = serializers.DateTimeField()


class MachineSerializer(serializers.Serializer):
    """Serializer for MachineDTO."""

    machine_id = serializers.CharField()
    machine_name = serializers.CharField()
    ip_address = serializers.CharField(allow_null=True)
    last_seen_at = serializers.DateTimeField()
    activated_at = serializers.DateTimeField()


class LicenseKeyListItemSerializer(LicenseKeySerializer):
    """Serializer for a key in the admin listing."""

    activation_count = serializers.IntegerField()
    last_machine = MachineSerializer(allow_null=True)


class LicenseKeyListResponseSerializer(serializers.Serializer):
    """Serializer for list keys response."""

    keys = LicenseKeyListItemSerializer(many=True)


class GenerateKeysResponseSerializer(serializers.Serializer):
    """Serializer for generate keys response."""

    message = serializers.CharField()
    keys = LicenseKeySerializer(many=True)


class ManageKeyResponseSerializer(serializers.Serializer):
    """Serializer for admin action response."""

    message = serializers.CharField()
    license_key = LicenseKeySerializer(allow_null=True)
    previous = serializers.DictField(allow_null=True)
    unbound_machine = serializers.CharField(allow_null=True)


class AuditLogEntrySerializer(serializers.Serializer):
    """Serializer for AuditLogEntryDTO."""

    id = serializers.UUIDField()
    license_key_id = serializers.UUIDField(allow_null=True)
    action = serializers.CharField()
    details = serializers.DictField()
    machine_id = serializers.CharField(allow_null=True)
    ip_address = serializers.CharField(allow_null=True)
    created_at = serializers.DateTimeField()
    license_key = serializers.CharField(allow_null=True)
    tier = serializers.CharField(allow_null=True)
    key_status = serializers.CharField(allow_null=True)


class AuditLogListResponseSerializer(serializers.Serializer):
    """Serializer for audit log response."""

    count = serializers.IntegerField()
    logs = AuditLogEntrySerializer(many=True)


class LicenseStatsSerializer(serializers.Serializer):
    """Serializer for LicenseStatsDTO."""

    licenses = serializers.DictField(child=serializers.IntegerField())
    tiers = serializers.DictField(child=serializers.IntegerField())
    activeMachines = serializers.IntegerField(source="active_machines")
    recentActivity = AuditLogEntrySerializer(source="recent_activity", many=True)
