"""
Django implementation of AuditLogRepository port.

This adapter converts between domain entities and Django ORM models.
"""
import uuid
from typing import List, Optional

from asgiref.sync import sync_to_async

from audit.domain.entries import (
    AuditAction,
    AuditLogEntry,
    AuditLogView,
    details_from_dict,
)
from audit.infrastructure.models import AuditLogEntry as AuditLogEntryModel
from audit.ports.audit_log_repository import AuditLogRepository
from core.infrastructure.database import storage_errors


class DjangoAuditLogRepository(AuditLogRepository):
    """
    Django ORM implementation of AuditLogRepository.

    This adapter:
    1. Converts Django models to domain entities
    2. Converts domain entities to Django models
    3. Implements repository interface
    """

    def _to_domain(self, model: AuditLogEntryModel) -> AuditLogEntry:
        """
        Convert Django model to domain entity.

        Args:
            model: Django AuditLogEntry model

        Returns:
            AuditLogEntry domain entity
        """
        action = AuditAction(model.action)
        return AuditLogEntry(
            id=model.id,
            license_key_id=model.license_key_id,
            details=details_from_dict(action, model.details),
            machine_id=model.machine_id,
            ip_address=model.ip_address,
            created_at=model.created_at,
        )

    def _to_view(self, model: AuditLogEntryModel) -> AuditLogView:
        license_key = model.license_key
        return AuditLogView(
            entry=self._to_domain(model),
            license_key=license_key.key if license_key else None,
            tier=license_key.tier if license_key else None,
            key_status=license_key.status if license_key else None,
        )

    @sync_to_async
    def append(self, entry: AuditLogEntry) -> AuditLogEntry:
        """
        Append an audit entry.

        Args:
            entry: AuditLogEntry entity to store

        Returns:
            Stored audit entry
        """
        with storage_errors("append audit entry"):
            # pylint: disable=no-member
            model = AuditLogEntryModel.objects.create(
                id=entry.id,
                license_key_id=entry.license_key_id,
                action=entry.action.value,
                details=entry.details.to_dict(),
                machine_id=entry.machine_id,
                ip_address=entry.ip_address,
                created_at=entry.created_at,
            )
        return self._to_domain(model)

    @sync_to_async
    def list(
        self,
        license_key_id: Optional[uuid.UUID] = None,
        action: Optional[AuditAction] = None,
        limit: int = 50,
    ) -> List[AuditLogView]:
        """
        List audit entries, newest first, joined with their key.

        Args:
            license_key_id: Optional key filter
            action: Optional action filter
            limit: Maximum number of entries

        Returns:
            List of AuditLogView
        """
        queryset = AuditLogEntryModel.objects.select_related("license_key")
        if license_key_id:
            queryset = queryset.filter(license_key_id=license_key_id)
        if action:
            queryset = queryset.filter(action=action.value)
        with storage_errors("list audit entries"):
            models = list(queryset.order_by("-created_at")[:limit])
        return [self._to_view(model) for model in models]

    @sync_to_async
    def delete_by_license_key(self, license_key_id: uuid.UUID) -> int:
        """Delete every audit entry of a license key."""
        with storage_errors("delete audit entries"):
            deleted, _ = AuditLogEntryModel.objects.filter(
                license_key_id=license_key_id
            ).delete()
        return deleted
