"""
ValidateLicenseHandler.

Heartbeat for an existing binding.
"""

import logging

from activations.application.commands.validate_license import ValidateLicenseCommand
from activations.application.dto.activation_dto import ActivationResultDTO
from activations.domain.services import Binding, BindingManager, LicenseKeyAdmission
from activations.ports.activation_repository import ActivationRepository
from core import metrics
from core.domain.clock import Clock, utc_now
from core.domain.exceptions import VALIDATION_ERRORS, NotActivatedError
from licenses.domain.key_codec import KeyCodec
from licenses.ports.license_key_repository import LicenseKeyRepository

logger = logging.getLogger(__name__)


class ValidateLicenseHandler:
    """Handler for ValidateLicenseCommand."""

    def __init__(
        self,
        key_codec: KeyCodec,
        license_key_repository: LicenseKeyRepository,
        activation_repository: ActivationRepository,
        clock: Clock = utc_now,
    ):
        """Initialize handler with codec and repositories."""
        self.key_codec = key_codec
        self.license_key_repository = license_key_repository
        self.activation_repository = activation_repository
        self.clock = clock

    async def handle(self, command: ValidateLicenseCommand) -> ActivationResultDTO:
        """
        Handle validate license command.

        Args:
            command: ValidateLicenseCommand

        Returns:
            ActivationResultDTO with current expiry

        Raises:
            KeyFormatError: If the key is malformed
            KeySignatureError: If the key is unknown and forged
            LicenseKeyNotFoundError: If the key was never activated
            LicenseRevokedError: If the key was revoked
            LicenseExpiredError: If the key has expired (status is updated)
            NotActivatedError: If the machine holds no live binding
        """
        try:
            result = await self._validate(command)
        except VALIDATION_ERRORS as exc:
            metrics.license_validations_total.labels(outcome=exc.code.lower()).inc()
            raise
        metrics.license_validations_total.labels(outcome="success").inc()
        return result

    async def _validate(self, command: ValidateLicenseCommand) -> ActivationResultDTO:
        now = self.clock()
        key = LicenseKeyAdmission.parse(command.license_key)
        license_key = await LicenseKeyAdmission.find_existing(
            key, self.key_codec, self.license_key_repository
        )
        LicenseKeyAdmission.ensure_usable(license_key)

        activation = await self.activation_repository.find_live_by_license_key_and_machine(
            license_key.id, command.machine_id
        )
        if activation is None:
            raise NotActivatedError()

        window = await BindingManager.expire_if_elapsed(
            license_key, activation, self.license_key_repository, now
        )
        refreshed = await self.activation_repository.save(
            activation.heartbeat(ip_address=command.ip_address, now=now)
        )
        logger.debug("Heartbeat for key %s from %s", license_key.id, refreshed.machine_id.masked())
        return ActivationResultDTO.from_binding(
            Binding(license_key, refreshed, window, created=False)
        )
