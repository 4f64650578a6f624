"""
LicenseKey repository port (interface).

This defines the contract for license key persistence operations.
Implementations are in the infrastructure layer.
"""
from abc import ABC, abstractmethod
from typing import Dict, List, Optional
import uuid

from licenses.domain.license_key import LicenseKey


class LicenseKeyRepository(ABC):
    """
    Abstract repository for LicenseKey entities.

    This is a port in hexagonal architecture - it defines
    what operations are available, not how they're implemented.
    """

    @abstractmethod
    async def insert(self, license_key: LicenseKey) -> LicenseKey:
        """
        Insert a new license key entity.

        Args:
            license_key: LicenseKey entity to insert

        Returns:
            Stored license key entity

        Raises:
            DuplicateLicenseKeyError: If the key string is already stored
        """
        pass

    @abstractmethod
    async def save(self, license_key: LicenseKey) -> LicenseKey:
        """
        Update an existing license key entity.

        Args:
            license_key: LicenseKey entity to save

        Returns:
            Saved license key entity
        """
        pass

    @abstractmethod
    async def find_by_id(
        self, license_key_id: uuid.UUID
    ) -> Optional[LicenseKey]:
        """
        Find a license key by ID.

        Args:
            license_key_id: License key UUID

        Returns:
            LicenseKey entity or None if not found
        """
        pass

    @abstractmethod
    async def find_by_key(self, key: str) -> Optional[LicenseKey]:
        """
        Find a license key by key string.

        Args:
            key: Normalized license key string

        Returns:
            LicenseKey entity or None if not found
        """
        pass

    @abstractmethod
    async def list_all(self) -> List[LicenseKey]:
        """
        List all license keys, newest first.

        Returns:
            List of LicenseKey entities
        """
        pass

    @abstractmethod
    async def count_by(self, field: str) -> Dict[str, int]:
        """
        Count license keys grouped by a field ("status" or "tier").

        Returns:
            Mapping of field value to count
        """
        pass

    @abstractmethod
    async def delete(self, license_key_id: uuid.UUID) -> bool:
        """
        Delete a license key.

        Args:
            license_key_id: License key UUID

        Returns:
            True if a key was deleted, False if it did not exist
        """
        pass
