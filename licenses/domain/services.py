"""
License domain services.

Domain services contain business logic that doesn't naturally
fit within a single entity.
"""
import logging
from datetime import datetime
from typing import List, Optional

from core.domain.exceptions import DuplicateLicenseKeyError, StorageError
from core.domain.value_objects import LicenseTier
from licenses.domain.key_codec import KeyCodec, floor_duration
from licenses.domain.license_key import LicenseKey
from licenses.ports.license_key_repository import LicenseKeyRepository

logger = logging.getLogger(__name__)


class LicenseKeyGenerator:
    """Domain service for issuing signed keys."""

    @staticmethod
    async def issue(
        codec: KeyCodec,
        repository: LicenseKeyRepository,
        tier: LicenseTier,
        count: int = 1,
        duration_days: int = 0,
        max_activations: int = 1,
        notes: str = "",
        attempts: int = 5,
        now: Optional[datetime] = None,
    ) -> List[LicenseKey]:
        """
        Generate and store a batch of keys.

        The duration is floored to a bucket before encoding. A generated
        string that already exists is regenerated.

        Args:
            codec: Codec holding the signing secret
            repository: License key repository
            tier: Tier to encode
            count: Number of keys
            duration_days: Requested duration, 0 for lifetime
            max_activations: Stored capacity
            notes: Free text stored on every key
            attempts: Tries per key on collision
            now: Issue time

        Returns:
            Stored LicenseKey entities in generation order

        Raises:
            StorageError: If a unique key could not be produced
        """
        bucket = floor_duration(duration_days)
        issued = []
        for _ in range(count):
            issued.append(
                await LicenseKeyGenerator._issue_one(
                    codec, repository, tier, bucket, max_activations, notes, attempts, now
                )
            )
        return issued

    @staticmethod
    async def _issue_one(codec, repository, tier, bucket, max_activations, notes, attempts, now):
        for _ in range(attempts):
            candidate = LicenseKey.create(
                key=codec.generate(tier, bucket, issued_at=now),
                tier=tier,
                duration_days=bucket,
                max_activations=max_activations,
                notes=notes,
                now=now,
            )
            try:
                return await repository.insert(candidate)
            except DuplicateLicenseKeyError:
                logger.warning("Generated key collided, retrying")
        raise StorageError()
