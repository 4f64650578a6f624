"""
GenerateKeysHandler.

Handler for issuing signed keys from the admin panel.
"""

import logging

from core import metrics
from core.domain.clock import Clock, utc_now
from core.domain.exceptions import InvalidAdminRequestError
from licenses.application.commands.generate_keys import GenerateKeysCommand
from licenses.application.dto.license_dto import GenerateKeysResponseDTO, LicenseKeyDTO
from licenses.domain.key_codec import KeyCodec
from licenses.domain.services import LicenseKeyGenerator
from licenses.ports.license_key_repository import LicenseKeyRepository

logger = logging.getLogger(__name__)


class GenerateKeysHandler:
    """Handler for GenerateKeysCommand."""

    def __init__(
        self,
        key_codec: KeyCodec,
        license_key_repository: LicenseKeyRepository,
        max_keys_per_request: int = 50,
        clock: Clock = utc_now,
    ):
        """Initialize handler with codec and repository."""
        self.key_codec = key_codec
        self.license_key_repository = license_key_repository
        self.max_keys_per_request = max_keys_per_request
        self.clock = clock

    async def handle(self, command: GenerateKeysCommand) -> GenerateKeysResponseDTO:
        """
        Handle generate keys command.

        The count is clamped to 1..max_keys_per_request and the duration
        is floored to a bucket.

        Args:
            command: GenerateKeysCommand

        Returns:
            GenerateKeysResponseDTO with the stored keys

        Raises:
            InvalidAdminRequestError: If duration or max_activations is out of range
        """
        if command.duration_days < 0:
            raise InvalidAdminRequestError("duration_days cannot be negative")
        if command.max_activations < 1:
            raise InvalidAdminRequestError("max_activations must be at least 1")

        count = max(1, min(command.count, self.max_keys_per_request))
        keys = await LicenseKeyGenerator.issue(
            codec=self.key_codec,
            repository=self.license_key_repository,
            tier=command.tier,
            count=count,
            duration_days=command.duration_days,
            max_activations=command.max_activations,
            notes=command.notes,
            now=self.clock(),
        )

        bucket = keys[0].duration_days
        metrics.license_keys_generated_total.labels(tier=command.tier.value).inc(len(keys))
        logger.info(
            "Generated %s %s key(s) with %s day bucket",
            len(keys),
            command.tier.value,
            bucket,
        )
        label = f"{bucket} days" if bucket else "lifetime"
        return GenerateKeysResponseDTO(
            message=f"Generated {len(keys)} key(s) ({label})",
            keys=[LicenseKeyDTO.from_entity(key) for key in keys],
        )
