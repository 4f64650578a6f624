"""
ListAuditLogQuery.
"""
import uuid
from dataclasses import dataclass
from typing import Optional

from audit.domain.entries import AuditAction


@dataclass
class ListAuditLogQuery:
    """Query for audit entries, newest first."""

    license_key_id: Optional[uuid.UUID] = None
    action: Optional[AuditAction] = None
    limit: Optional[int] = None
