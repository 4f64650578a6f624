"""
Audit log DTOs for API responses.
"""
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from audit.domain.entries import AuditLogView


@dataclass
class AuditLogEntryDTO:
    """DTO for an audit entry joined with its key."""

    id: uuid.UUID
    license_key_id: Optional[uuid.UUID]
    action: str
    details: Dict[str, Any]
    machine_id: Optional[str]
    ip_address: Optional[str]
    created_at: datetime
    license_key: Optional[str] = None
    tier: Optional[str] = None
    key_status: Optional[str] = None

    @classmethod
    def from_view(cls, view: AuditLogView) -> "AuditLogEntryDTO":
        """Build the DTO from a joined audit view."""
        entry = view.entry
        return cls(
            id=entry.id,
            license_key_id=entry.license_key_id,
            action=entry.action.value,
            details=entry.details.to_dict(),
            machine_id=entry.machine_id,
            ip_address=entry.ip_address,
            created_at=entry.created_at,
            license_key=view.license_key,
            tier=view.tier,
            key_status=view.key_status,
        )
