"""
AuditLog repository port (interface).

This defines the contract for audit log persistence operations.
Implementations are in the infrastructure layer.
"""
from abc import ABC, abstractmethod
from typing import List, Optional
import uuid

from audit.domain.entries import AuditAction, AuditLogEntry, AuditLogView


class AuditLogRepository(ABC):
    """
    Abstract repository for AuditLogEntry entities.

    Entries are append-only: there is no update operation.
    """

    @abstractmethod
    async def append(self, entry: AuditLogEntry) -> AuditLogEntry:
        """
        Append an audit entry.

        Args:
            entry: AuditLogEntry entity to store

        Returns:
            Stored audit entry
        """
        pass

    @abstractmethod
    async def list(
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
        pass

    @abstractmethod
    async def delete_by_license_key(self, license_key_id: uuid.UUID) -> int:
        """
        Delete every audit entry of a license key (admin delete cascade).

        Args:
            license_key_id: License key UUID

        Returns:
            Number of deleted entries
        """
        pass
