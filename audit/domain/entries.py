"""
Audit log domain entities.

Each action has its own details variant so the fields recorded for it
are known statically. Variants serialize to the JSON payload stored in
license_audit_log.details and are rebuilt from it by action.
"""

import uuid
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Type

from core.domain.clock import utc_now


class AuditAction(Enum):
    """Actions recorded in the audit log."""

    ACTIVATE = "activate"
    REACTIVATE = "reactivate"
    ADMIN_REVOKE = "admin_revoke"
    ADMIN_RESET = "admin_reset"
    ADMIN_UNBIND = "admin_unbind"
    ADMIN_UPGRADE = "admin_upgrade"
    ADMIN_DOWNGRADE = "admin_downgrade"
    ADMIN_DELETE = "admin_delete"

    def __str__(self) -> str:
        """Return action as string."""
        return self.value


@dataclass(frozen=True)
class AuditDetails:
    """Base class for per-action details."""

    action: ClassVar[AuditAction]

    def to_dict(self) -> Dict[str, Any]:
        """Convert details to a JSON-serializable dictionary."""
        return asdict(self)


@dataclass(frozen=True)
class ActivateDetails(AuditDetails):
    """A key was bound to a machine."""

    action: ClassVar[AuditAction] = AuditAction.ACTIVATE

    machine_name: str
    app_version: str
    tier: str


@dataclass(frozen=True)
class ReactivateDetails(AuditDetails):
    """An admin returned a key to active."""

    action: ClassVar[AuditAction] = AuditAction.REACTIVATE

    previous_status: str


@dataclass(frozen=True)
class RevokeDetails(AuditDetails):
    """An admin revoked a key."""

    action: ClassVar[AuditAction] = AuditAction.ADMIN_REVOKE

    previous_status: str


@dataclass(frozen=True)
class ResetDetails(AuditDetails):
    """An admin released every live binding of a key."""

    action: ClassVar[AuditAction] = AuditAction.ADMIN_RESET

    previous_status: str
    released_machines: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class UnbindDetails(AuditDetails):
    """An admin released the binding of one machine."""

    action: ClassVar[AuditAction] = AuditAction.ADMIN_UNBIND

    unbound_machine: str
    previous_status: str


@dataclass(frozen=True)
class PlanChangeDetails(AuditDetails):
    """Before/after values of a tier or duration change."""

    previous_tier: str
    new_tier: str
    previous_duration_days: int
    new_duration_days: int
    previous_max_activations: int
    new_max_activations: int
    previous_expires_at: Optional[str]
    new_expires_at: Optional[str]


@dataclass(frozen=True)
class UpgradeDetails(PlanChangeDetails):
    """An admin upgraded a key."""

    action: ClassVar[AuditAction] = AuditAction.ADMIN_UPGRADE


@dataclass(frozen=True)
class DowngradeDetails(PlanChangeDetails):
    """An admin downgraded a key."""

    action: ClassVar[AuditAction] = AuditAction.ADMIN_DOWNGRADE


@dataclass(frozen=True)
class DeleteDetails(AuditDetails):
    """An admin deleted a key with its activations and history."""

    action: ClassVar[AuditAction] = AuditAction.ADMIN_DELETE

    license_key: str
    tier: str
    activations_removed: int


DETAILS_BY_ACTION: Dict[AuditAction, Type[AuditDetails]] = {
    details_cls.action: details_cls
    for details_cls in (
        ActivateDetails,
        ReactivateDetails,
        RevokeDetails,
        ResetDetails,
        UnbindDetails,
        UpgradeDetails,
        DowngradeDetails,
        DeleteDetails,
    )
}


def details_from_dict(action: AuditAction, payload: Optional[Dict[str, Any]]) -> AuditDetails:
    """
    Rebuild the details variant for an action from its stored payload.

    Unknown keys in the payload are ignored.
    """
    details_cls = DETAILS_BY_ACTION[action]
    payload = payload or {}
    known = {f.name for f in fields(details_cls)}
    return details_cls(**{name: value for name, value in payload.items() if name in known})


@dataclass(frozen=True)
class AuditLogEntry:
    """
    AuditLogEntry domain entity.

    Append-only record of an activation or admin action.
    """

    id: uuid.UUID
    license_key_id: Optional[uuid.UUID]
    details: AuditDetails
    machine_id: Optional[str]
    ip_address: Optional[str]
    created_at: datetime

    @property
    def action(self) -> AuditAction:
        """Action tag of the details variant."""
        return self.details.action

    @classmethod
    def create(
        cls,
        license_key_id: Optional[uuid.UUID],
        details: AuditDetails,
        machine_id: Optional[str] = None,
        ip_address: Optional[str] = None,
        entry_id: Optional[uuid.UUID] = None,
        now: Optional[datetime] = None,
    ) -> "AuditLogEntry":
        """
        Create a new AuditLogEntry entity.

        Args:
            license_key_id: Owning key, None once the key is deleted
            details: Details variant; determines the action
            machine_id: Machine involved, if any
            ip_address: Caller IP, if known
            entry_id: Optional UUID (generated if not provided)
            now: Creation time (defaults to current UTC time)

        Returns:
            AuditLogEntry entity instance
        """
        return cls(
            id=entry_id or uuid.uuid4(),
            license_key_id=license_key_id,
            details=details,
            machine_id=machine_id,
            ip_address=ip_address,
            created_at=now or utc_now(),
        )


@dataclass(frozen=True)
class AuditLogView:
    """Audit entry joined with its key for listing."""

    entry: AuditLogEntry
    license_key: Optional[str]
    tier: Optional[str]
    key_status: Optional[str]
