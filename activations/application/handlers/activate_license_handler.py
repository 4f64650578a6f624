"""
ActivateLicenseHandler.

Handler for binding a license key to a machine.
"""

import logging

from activations.application.commands.activate_license import ActivateLicenseCommand
from activations.application.dto.activation_dto import ActivationResultDTO
from activations.domain.services import BindingManager, LicenseKeyAdmission
from activations.ports.activation_repository import ActivationRepository
from audit.application.services.audit_log import AuditLog
from core import metrics
from core.domain.clock import Clock, utc_now
from core.domain.exceptions import VALIDATION_ERRORS
from licenses.domain.key_codec import KeyCodec
from licenses.ports.license_key_repository import LicenseKeyRepository

logger = logging.getLogger(__name__)


class ActivateLicenseHandler:
    """Handler for ActivateLicenseCommand."""

    def __init__(
        self,
        key_codec: KeyCodec,
        license_key_repository: LicenseKeyRepository,
        activation_repository: ActivationRepository,
        audit_log: AuditLog,
        bind_attempts: int = 3,
        clock: Clock = utc_now,
    ):
        """Initialize handler with codec, repositories and audit log."""
        self.key_codec = key_codec
        self.license_key_repository = license_key_repository
        self.activation_repository = activation_repository
        self.audit_log = audit_log
        self.bind_attempts = bind_attempts
        self.clock = clock

    async def handle(self, command: ActivateLicenseCommand) -> ActivationResultDTO:
        """
        Handle activate license command.

        Args:
            command: ActivateLicenseCommand

        Returns:
            ActivationResultDTO with tier and expiry

        Raises:
            KeyFormatError: If the key is malformed
            KeySignatureError: If the key is unknown and forged
            LicenseRevokedError: If the key was revoked
            LicenseExpiredError: If the key has expired
            AlreadyBoundToOtherMachineError: If another machine holds the key
        """
        try:
            result = await self._activate(command)
        except VALIDATION_ERRORS as exc:
            metrics.license_activations_total.labels(outcome=exc.code.lower()).inc()
            logger.info("Activation rejected: %s", exc.code)
            raise
        metrics.license_activations_total.labels(outcome="success").inc()
        return result

    async def _activate(self, command: ActivateLicenseCommand) -> ActivationResultDTO:
        now = self.clock()
        key = LicenseKeyAdmission.parse(command.license_key)
        license_key = await LicenseKeyAdmission.find_or_import(
            key, self.key_codec, self.license_key_repository, now=now
        )
        LicenseKeyAdmission.ensure_usable(license_key)

        binding = await BindingManager.bind(
            license_key=license_key,
            machine_id=command.machine_id,
            activation_repository=self.activation_repository,
            license_key_repository=self.license_key_repository,
            machine_name=command.machine_name,
            app_version=command.app_version,
            ip_address=command.ip_address,
            attempts=self.bind_attempts,
            now=now,
        )

        if not binding.created:
            return ActivationResultDTO.from_binding(binding)

        await self.audit_log.record_activation(binding.license_key, binding.activation)
        logger.info(
            "License key %s bound to machine %s",
            binding.license_key.id,
            binding.activation.machine_id.masked(),
        )
        return ActivationResultDTO.from_binding(
            binding, message="License active. This key is now bound to this device."
        )
