"""
Handler wiring for the v1 API views.

Repositories are stateless and shared; settings are read per request so
test overrides apply.
"""

from django.conf import settings
from django.http import HttpRequest

from activations.infrastructure.repositories.django_activation_repository import (
    DjangoActivationRepository,
)
from audit.application.services.audit_log import AuditLog
from audit.infrastructure.repositories.django_audit_log_repository import (
    DjangoAuditLogRepository,
)
from licenses.domain.key_codec import KeyCodec
from licenses.infrastructure.repositories.django_license_key_repository import (
    DjangoLicenseKeyRepository,
)

# Initialize repositories (in production, use DI container)
license_key_repo = DjangoLicenseKeyRepository()
activation_repo = DjangoActivationRepository()
audit_log_repo = DjangoAuditLogRepository()
audit_log = AuditLog(audit_log_repo)


def license_setting(name: str):
    """Read a value from settings.LICENSE_SETTINGS."""
    return settings.LICENSE_SETTINGS[name]


def key_codec() -> KeyCodec:
    """Build the key codec from settings.LICENSE_SECRET."""
    return KeyCodec(settings.LICENSE_SECRET)


def client_ip(request: HttpRequest):
    """Return the caller IP, preferring the first X-Forwarded-For hop."""
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR")
