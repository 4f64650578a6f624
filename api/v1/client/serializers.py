"""
Serializers for client-facing license endpoints.

Response field names follow the desktop client's wire contract.
"""

from rest_framework import serializers


class ValidateLicenseRequestSerializer(serializers.Serializer):
    """Serializer for validate license request."""

    key = serializers.CharField(required=True, max_length=64)
    machine_id = serializers.CharField(required=True, max_length=255)


class ActivateLicenseRequestSerializer(ValidateLicenseRequestSerializer):
    """Serializer for activate license request."""

    machine_name = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, max_length=255
    )
    app_version = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, max_length=50
    )


class DeactivateLicenseRequestSerializer(serializers.Serializer):
    """Serializer for deactivate license request."""

    key = serializers.CharField(required=False, allow_blank=True, max_length=64)
    machine_id = serializers.CharField(required=False, allow_blank=True, max_length=255)


class ActivationResultSerializer(serializers.Serializer):
    """Serializer for a successful activate or validate response."""

    valid = serializers.BooleanField()
    tier = serializers.CharField()
    expiresAt = serializers.DateTimeField(source="expires_at", allow_null=True)
    daysRemaining = serializers.IntegerField(source="days_remaining")
    activatedAt = serializers.DateTimeField(source="activated_at")
    machineId = serializers.CharField(source="machine_id")
    bound = serializers.BooleanField()
    message = serializers.CharField(required=False, allow_null=True)

    def to_representation(self, instance):
        """Omit the message when there is none."""
        data = super().to_representation(instance)
        if data.get("message") is None:
            data.pop("message", None)
        return data


class ActivationFailureSerializer(serializers.Serializer):
    """Serializer for a rejected client request."""

    OPTIONAL_FIELDS = ("bound_to", "contact_admin")

    valid = serializers.BooleanField()
    reason = serializers.CharField()
    code = serializers.CharField()
    bound_to = serializers.CharField(required=False, allow_null=True)
    contact_admin = serializers.BooleanField(required=False, allow_null=True)

    def to_representation(self, instance):
        """Omit optional fields that do not apply."""
        data = super().to_representation(instance)
        for name in self.OPTIONAL_FIELDS:
            if data.get(name) is None:
                data.pop(name, None)
        return data
