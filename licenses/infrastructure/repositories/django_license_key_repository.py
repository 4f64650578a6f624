"""
Django implementation of LicenseKeyRepository port.

This adapter converts between domain entities and Django ORM models.
"""
import uuid
from typing import Dict, List, Optional

from asgiref.sync import sync_to_async
from django.db import IntegrityError, transaction
from django.db.models import Count

from core.domain.exceptions import DuplicateLicenseKeyError
from core.domain.value_objects import LicenseStatus, LicenseTier
from core.infrastructure.database import storage_errors
from licenses.domain.license_key import LicenseKey
from licenses.infrastructure.models import (
    LicenseKey as LicenseKeyModel,
)
from licenses.ports.license_key_repository import LicenseKeyRepository

COUNTABLE_FIELDS = ("status", "tier")


class DjangoLicenseKeyRepository(LicenseKeyRepository):
    """
    Django ORM implementation of LicenseKeyRepository.

    This adapter:
    1. Converts Django models to domain entities
    2. Converts domain entities to Django models
    3. Implements repository interface
    """

    def _to_domain(self, model: LicenseKeyModel) -> LicenseKey:
        """
        Convert Django model to domain entity.

        Args:
            model: Django LicenseKey model

        Returns:
            LicenseKey domain entity
        """
        return LicenseKey(
            id=model.id,
            key=model.key,
            tier=LicenseTier(model.tier),
            status=LicenseStatus(model.status),
            duration_days=model.duration_days,
            expires_at=model.expires_at,
            max_activations=model.max_activations,
            notes=model.notes,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_fields(self, license_key: LicenseKey) -> dict:
        """
        Convert domain entity to Django model field values.

        Args:
            license_key: LicenseKey domain entity

        Returns:
            Field values keyed by model field name, without the id
        """
        return {
            "key": license_key.key,
            "tier": license_key.tier.value,
            "status": license_key.status.value,
            "duration_days": license_key.duration_days,
            "expires_at": license_key.expires_at,
            "max_activations": license_key.max_activations,
            "notes": license_key.notes,
            "created_at": license_key.created_at,
            "updated_at": license_key.updated_at,
        }

    @sync_to_async
    def insert(self, license_key: LicenseKey) -> LicenseKey:
        """
        Insert a new license key.

        Raises:
            DuplicateLicenseKeyError: If the key string is already stored
        """
        with storage_errors("insert license key"):
            try:
                with transaction.atomic():
                    model = LicenseKeyModel.objects.create(
                        id=license_key.id, **self._to_fields(license_key)
                    )
            except IntegrityError as exc:
                raise DuplicateLicenseKeyError() from exc
        return self._to_domain(model)

    @sync_to_async
    def save(self, license_key: LicenseKey) -> LicenseKey:
        """
        Save a license key entity.

        Args:
            license_key: LicenseKey entity to save

        Returns:
            Saved license key entity
        """
        with storage_errors("save license key"):
            model, _ = LicenseKeyModel.objects.update_or_create(
                id=license_key.id, defaults=self._to_fields(license_key)
            )
        return self._to_domain(model)

    @sync_to_async
    def find_by_id(
        self, license_key_id: uuid.UUID
    ) -> Optional[LicenseKey]:
        """
        Find a license key by ID.

        Args:
            license_key_id: License key UUID

        Returns:
            LicenseKey entity or None if not found
        """
        with storage_errors("find license key"):
            try:
                model = LicenseKeyModel.objects.get(id=license_key_id)
            except LicenseKeyModel.DoesNotExist:
                return None
        return self._to_domain(model)

    @sync_to_async
    def find_by_key(self, key: str) -> Optional[LicenseKey]:
        """
        Find a license key by key string.

        Args:
            key: License key string

        Returns:
            LicenseKey entity or None if not found
        """
        with storage_errors("find license key"):
            try:
                model = LicenseKeyModel.objects.get(key=key)
            except LicenseKeyModel.DoesNotExist:
                return None
        return self._to_domain(model)

    @sync_to_async
    def list_all(self) -> List[LicenseKey]:
        """List every license key, newest first."""
        with storage_errors("list license keys"):
            models = list(LicenseKeyModel.objects.order_by("-created_at"))
        return [self._to_domain(model) for model in models]

    @sync_to_async
    def count_by(self, field: str) -> Dict[str, int]:
        """
        Count license keys grouped by status or tier.

        Raises:
            ValueError: If the field is not countable
        """
        if field not in COUNTABLE_FIELDS:
            raise ValueError(f"Cannot count license keys by {field}")
        with storage_errors("count license keys"):
            rows = LicenseKeyModel.objects.values(field).annotate(total=Count("id")).order_by()
            return {row[field]: row["total"] for row in rows}

    @sync_to_async
    def delete(self, license_key_id: uuid.UUID) -> bool:
        """Delete a license key; activations and audit entries cascade."""
        with storage_errors("delete license key"):
            deleted, _ = LicenseKeyModel.objects.filter(id=license_key_id).delete()
        return deleted > 0
