"""
ListKeysHandler.

Handler for listing keys with their binding summary.
"""

from typing import List

from activations.ports.activation_repository import ActivationRepository
from licenses.application.dto.license_dto import LicenseKeyListItemDTO, MachineDTO
from licenses.application.queries.list_keys import ListKeysQuery
from licenses.ports.license_key_repository import LicenseKeyRepository


class ListKeysHandler:
    """Handler for ListKeysQuery."""

    def __init__(
        self,
        license_key_repository: LicenseKeyRepository,
        activation_repository: ActivationRepository,
    ):
        """Initialize handler with repositories."""
        self.license_key_repository = license_key_repository
        self.activation_repository = activation_repository

    async def handle(self, query: ListKeysQuery) -> List[LicenseKeyListItemDTO]:
        """
        Handle list keys query.

        Args:
            query: ListKeysQuery

        Returns:
            Keys newest first, each with its live activation count and
            the most recently seen live machine
        """
        license_keys = await self.license_key_repository.list_all()
        live_by_key = await self.activation_repository.list_live_by_license_keys(
            [license_key.id for license_key in license_keys]
        )
        items = []
        for license_key in license_keys:
            live = live_by_key.get(license_key.id, [])
            last_seen = max(live, key=lambda activation: activation.last_seen_at, default=None)
            base = LicenseKeyListItemDTO.from_entity(license_key)
            base.activation_count = len(live)
            base.last_machine = MachineDTO.from_entity(last_seen) if last_seen else None
            items.append(base)
        return items
