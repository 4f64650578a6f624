"""
AuditLog recorder.

Application service invoked by the activation and admin handlers to
append one entry per state-changing action.
"""

import logging
from typing import List, Optional

from activations.domain.activation import Activation
from audit.domain.entries import (
    ActivateDetails,
    AuditLogEntry,
    DeleteDetails,
    DowngradeDetails,
    ReactivateDetails,
    ResetDetails,
    RevokeDetails,
    UnbindDetails,
    UpgradeDetails,
)
from audit.ports.audit_log_repository import AuditLogRepository
from licenses.domain.license_key import LicenseKey

logger = logging.getLogger(__name__)


def _isoformat(value) -> Optional[str]:
    return value.isoformat() if value else None


class AuditLog:
    """Append-only recorder for license events."""

    def __init__(self, repository: AuditLogRepository):
        """Initialize recorder with repository."""
        self.repository = repository

    async def _append(self, entry: AuditLogEntry) -> AuditLogEntry:
        logger.info(
            "Audit log: %s - %s",
            entry.action.value,
            entry.license_key_id,
            extra={
                "audit_action": entry.action.value,
                "license_key_id": str(entry.license_key_id) if entry.license_key_id else None,
                "machine_id": entry.machine_id,
            },
        )
        return await self.repository.append(entry)

    async def record_activation(
        self, license_key: LicenseKey, activation: Activation
    ) -> AuditLogEntry:
        """Record a new machine binding."""
        return await self._append(
            AuditLogEntry.create(
                license_key_id=license_key.id,
                details=ActivateDetails(
                    machine_name=activation.machine_name,
                    app_version=activation.app_version,
                    tier=license_key.tier.value,
                ),
                machine_id=activation.machine_id.value,
                ip_address=activation.ip_address,
            )
        )

    async def record_reactivation(self, previous: LicenseKey) -> AuditLogEntry:
        """Record an admin returning a key to active."""
        return await self._append(
            AuditLogEntry.create(
                license_key_id=previous.id,
                details=ReactivateDetails(previous_status=previous.status.value),
            )
        )

    async def record_revoke(self, previous: LicenseKey) -> AuditLogEntry:
        """Record an admin revoke."""
        return await self._append(
            AuditLogEntry.create(
                license_key_id=previous.id,
                details=RevokeDetails(previous_status=previous.status.value),
            )
        )

    async def record_reset(
        self, previous: LicenseKey, released: List[Activation]
    ) -> AuditLogEntry:
        """Record an admin reset of every binding."""
        return await self._append(
            AuditLogEntry.create(
                license_key_id=previous.id,
                details=ResetDetails(
                    previous_status=previous.status.value,
                    released_machines=[activation.machine_id.value for activation in released],
                ),
            )
        )

    async def record_unbind(self, previous: LicenseKey, released: Activation) -> AuditLogEntry:
        """Record an admin unbind of one machine."""
        return await self._append(
            AuditLogEntry.create(
                license_key_id=previous.id,
                details=UnbindDetails(
                    unbound_machine=released.display_name,
                    previous_status=previous.status.value,
                ),
                machine_id=released.machine_id.value,
            )
        )

    async def record_plan_change(
        self, previous: LicenseKey, current: LicenseKey, upgrade: bool
    ) -> AuditLogEntry:
        """Record an admin upgrade or downgrade with before/after values."""
        details_cls = UpgradeDetails if upgrade else DowngradeDetails
        return await self._append(
            AuditLogEntry.create(
                license_key_id=current.id,
                details=details_cls(
                    previous_tier=previous.tier.value,
                    new_tier=current.tier.value,
                    previous_duration_days=previous.duration_days,
                    new_duration_days=current.duration_days,
                    previous_max_activations=previous.max_activations,
                    new_max_activations=current.max_activations,
                    previous_expires_at=_isoformat(previous.expires_at),
                    new_expires_at=_isoformat(current.expires_at),
                ),
            )
        )

    async def record_delete(
        self, deleted: LicenseKey, activations_removed: int
    ) -> AuditLogEntry:
        """
        Record an admin delete.

        The key's own history is gone at this point, so the entry is
        stored without a key reference and names the key in its details.
        """
        return await self._append(
            AuditLogEntry.create(
                license_key_id=None,
                details=DeleteDetails(
                    license_key=deleted.key,
                    tier=deleted.tier.value,
                    activations_removed=activations_removed,
                ),
            )
        )
