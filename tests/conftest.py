"""
Pytest configuration and shared fixtures.
"""

from datetime import datetime, timezone

import pytest
from asgiref.sync import async_to_sync
from django.conf import settings

from activations.application.handlers.activate_license_handler import ActivateLicenseHandler
from activations.application.handlers.validate_license_handler import ValidateLicenseHandler
from activations.infrastructure.repositories.django_activation_repository import (
    DjangoActivationRepository,
)
from audit.application.services.audit_log import AuditLog
from audit.infrastructure.repositories.django_audit_log_repository import (
    DjangoAuditLogRepository,
)
from core.domain.value_objects import LicenseTier
from licenses.application.handlers.admin_override_handlers import ManageKeyHandler
from licenses.domain.key_codec import KeyCodec
from licenses.domain.license_key import LicenseKey
from licenses.infrastructure.repositories.django_license_key_repository import (
    DjangoLicenseKeyRepository,
)
from tests.fakes import (
    FrozenClock,
    InMemoryActivationRepository,
    InMemoryAuditLogRepository,
    InMemoryLicenseKeyRepository,
)

T0 = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def codec():
    """Fixture for a KeyCodec using the test secret."""
    return KeyCodec(settings.LICENSE_SECRET)


@pytest.fixture
def clock():
    """Fixture for a clock pinned to T0."""
    return FrozenClock(T0)


# In-memory ports for handler tests


@pytest.fixture
def key_repo():
    """Fixture for an in-memory LicenseKeyRepository."""
    return InMemoryLicenseKeyRepository()


@pytest.fixture
def activation_repo():
    """Fixture for an in-memory ActivationRepository."""
    return InMemoryActivationRepository()


@pytest.fixture
def audit_repo(key_repo):
    """Fixture for an in-memory AuditLogRepository."""
    return InMemoryAuditLogRepository(key_repo)


@pytest.fixture
def audit_log(audit_repo):
    """Fixture for the AuditLog recorder."""
    return AuditLog(audit_repo)


@pytest.fixture
def activate_handler(codec, key_repo, activation_repo, audit_log, clock):
    """Fixture for ActivateLicenseHandler over in-memory ports."""
    return ActivateLicenseHandler(
        key_codec=codec,
        license_key_repository=key_repo,
        activation_repository=activation_repo,
        audit_log=audit_log,
        clock=clock,
    )


@pytest.fixture
def validate_handler(codec, key_repo, activation_repo, clock):
    """Fixture for ValidateLicenseHandler over in-memory ports."""
    return ValidateLicenseHandler(
        key_codec=codec,
        license_key_repository=key_repo,
        activation_repository=activation_repo,
        clock=clock,
    )


@pytest.fixture
def manage_handler(key_repo, activation_repo, audit_repo, audit_log, clock):
    """Fixture for ManageKeyHandler over in-memory ports."""
    return ManageKeyHandler(
        license_key_repository=key_repo,
        activation_repository=activation_repo,
        audit_log_repository=audit_repo,
        audit_log=audit_log,
        clock=clock,
    )


@pytest.fixture
def stored_key(codec, key_repo):
    """Fixture for a 30-day pro key stored in the in-memory repository."""
    key = LicenseKey.create(
        key=codec.generate(LicenseTier.PRO, 30, issued_at=T0),
        tier=LicenseTier.PRO,
        duration_days=30,
        now=T0,
    )
    key_repo.keys[key.id] = key
    return key


# Django repositories for integration tests


@pytest.fixture
def license_key_repository():
    """Fixture for LicenseKeyRepository."""
    return DjangoLicenseKeyRepository()


@pytest.fixture
def activation_repository():
    """Fixture for ActivationRepository."""
    return DjangoActivationRepository()


@pytest.fixture
def audit_log_repository():
    """Fixture for AuditLogRepository."""
    return DjangoAuditLogRepository()


@pytest.fixture
def db_license_key(db, codec, license_key_repository):
    """Fixture for a 30-day pro LicenseKey saved in database."""
    key = LicenseKey.create(
        key=codec.generate(LicenseTier.PRO, 30),
        tier=LicenseTier.PRO,
        duration_days=30,
    )
    return async_to_sync(license_key_repository.insert)(key)


@pytest.fixture
def api_client():
    """Fixture for DRF API client."""
    from rest_framework.test import APIClient

    return APIClient()


@pytest.fixture
def admin_client(api_client):
    """Fixture for an API client sending the admin key."""
    api_client.credentials(HTTP_X_ADMIN_KEY=settings.ADMIN_API_KEY)
    return api_client
