"""
License DTOs for API responses.
"""
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from activations.domain.activation import Activation
from audit.application.dto.audit_dto import AuditLogEntryDTO
from licenses.domain.license_key import LicenseKey


@dataclass
class LicenseKeyDTO:
    """DTO for license key information."""

    id: uuid.UUID
    key: str
    tier: str
    status: str
    duration_days: int
    expires_at: Optional[datetime]
    max_activations: int
    notes: str
    created_at: datetime

    @classmethod
    def from_entity(cls, license_key: LicenseKey) -> "LicenseKeyDTO":
        """Build the DTO from a domain entity."""
        return cls(
            id=license_key.id,
            key=license_key.key,
            tier=license_key.tier.value,
            status=license_key.status.value,
            duration_days=license_key.duration_days,
            expires_at=license_key.expires_at,
            max_activations=license_key.max_activations,
            notes=license_key.notes,
            created_at=license_key.created_at,
        )


@dataclass
class MachineDTO:
    """DTO for the machine a key is bound to."""

    machine_id: str
    machine_name: str
    ip_address: Optional[str]
    last_seen_at: datetime
    activated_at: datetime

    @classmethod
    def from_entity(cls, activation: Activation) -> "MachineDTO":
        """Build the DTO from an activation."""
        return cls(
            machine_id=activation.machine_id.value,
            machine_name=activation.machine_name,
            ip_address=activation.ip_address,
            last_seen_at=activation.last_seen_at,
            activated_at=activation.activated_at,
        )


@dataclass
class LicenseKeyListItemDTO(LicenseKeyDTO):
    """DTO for a key in the admin listing."""

    activation_count: int = 0
    last_machine: Optional[MachineDTO] = None


@dataclass
class GenerateKeysResponseDTO:
    """DTO for generate keys response."""

    message: str
    keys: List[LicenseKeyDTO]


@dataclass
class ManageKeyResponseDTO:
    """DTO for an admin action response."""

    message: str
    license_key: Optional[LicenseKeyDTO] = None
    previous: Optional[Dict[str, Any]] = None
    unbound_machine: Optional[str] = None


@dataclass
class LicenseStatsDTO:
    """DTO for the admin dashboard counters."""

    licenses: Dict[str, int]
    tiers: Dict[str, int]
    active_machines: int
    recent_activity: List[AuditLogEntryDTO] = field(default_factory=list)
