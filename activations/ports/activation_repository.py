"""
Activation repository port (interface).

This defines the contract for activation persistence operations.
Implementations are in the infrastructure layer and must guarantee that
a license key never has more than one live activation.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, Iterable, List, Optional
import uuid

from activations.domain.activation import Activation


class ActivationRepository(ABC):
    """
    Abstract repository for Activation entities.

    This is a port in hexagonal architecture - it defines
    what operations are available, not how they're implemented.
    """

    @abstractmethod
    async def insert(self, activation: Activation) -> Activation:
        """
        Insert a new live activation.

        Args:
            activation: Activation entity to insert

        Returns:
            Stored activation entity

        Raises:
            LiveActivationExistsError: If the key already has a live
                activation (enforced by the store, not by the caller)
        """
        pass

    @abstractmethod
    async def save(self, activation: Activation) -> Activation:
        """
        Update an existing activation (heartbeat fields).

        Args:
            activation: Activation entity to save

        Returns:
            Saved activation entity
        """
        pass

    @abstractmethod
    async def find_live_by_license_key(
        self, license_key_id: uuid.UUID
    ) -> Optional[Activation]:
        """
        Find the live activation of a license key.

        Args:
            license_key_id: License key UUID

        Returns:
            Live Activation entity or None if the key is unbound
        """
        pass

    @abstractmethod
    async def find_live_by_license_key_and_machine(
        self, license_key_id: uuid.UUID, machine_id: str
    ) -> Optional[Activation]:
        """
        Find the live activation of a license key on a specific machine.

        Args:
            license_key_id: License key UUID
            machine_id: Machine identifier

        Returns:
            Activation entity or None if not found
        """
        pass

    @abstractmethod
    async def list_live_by_license_key(
        self, license_key_id: uuid.UUID
    ) -> List[Activation]:
        """
        List live activations of a license key, earliest first.

        Args:
            license_key_id: License key UUID

        Returns:
            List of live Activation entities
        """
        pass

    @abstractmethod
    async def list_live_by_license_keys(
        self, license_key_ids: Iterable[uuid.UUID]
    ) -> Dict[uuid.UUID, List[Activation]]:
        """
        List live activations for many keys in one round trip.

        Args:
            license_key_ids: License key UUIDs

        Returns:
            Mapping of key id to its live activations, earliest first;
            keys without a live activation are absent
        """
        pass

    @abstractmethod
    async def deactivate(
        self, activation: Activation, now: Optional[datetime] = None
    ) -> Activation:
        """
        Release a binding by setting deactivated_at.

        Args:
            activation: Live activation to release
            now: Release time (defaults to current UTC time)

        Returns:
            Deactivated activation entity
        """
        pass

    @abstractmethod
    async def count_live(self) -> int:
        """
        Count live activations across all keys.

        Returns:
            Number of machines currently bound
        """
        pass

    @abstractmethod
    async def delete_by_license_key(self, license_key_id: uuid.UUID) -> int:
        """
        Delete every activation of a license key.

        Args:
            license_key_id: License key UUID

        Returns:
            Number of deleted activations
        """
        pass
