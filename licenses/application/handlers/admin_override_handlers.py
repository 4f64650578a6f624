"""
Admin override handlers.

Privileged actions on a single key. These act on the stored records
directly and bypass the binding negotiation used by activate.
"""
import logging
from datetime import datetime

from activations.ports.activation_repository import ActivationRepository
from audit.application.services.audit_log import AuditLog
from audit.ports.audit_log_repository import AuditLogRepository
from core import metrics
from core.domain.clock import Clock, utc_now
from core.domain.exceptions import InvalidAdminRequestError, LicenseKeyNotFoundError
from licenses.application.commands.manage_key import KeyAction, ManageKeyCommand
from licenses.application.dto.license_dto import LicenseKeyDTO, ManageKeyResponseDTO
from licenses.domain.license_key import LicenseKey
from licenses.ports.license_key_repository import LicenseKeyRepository

logger = logging.getLogger(__name__)


def _snapshot(license_key: LicenseKey) -> dict:
    return {
        "tier": license_key.tier.value,
        "status": license_key.status.value,
        "duration_days": license_key.duration_days,
        "max_activations": license_key.max_activations,
        "expires_at": license_key.expires_at.isoformat() if license_key.expires_at else None,
    }


class ManageKeyHandler:
    """Handler for ManageKeyCommand."""

    def __init__(
        self,
        license_key_repository: LicenseKeyRepository,
        activation_repository: ActivationRepository,
        audit_log_repository: AuditLogRepository,
        audit_log: AuditLog,
        clock: Clock = utc_now,
    ):
        """Initialize handler with repositories and audit log."""
        self.license_key_repository = license_key_repository
        self.activation_repository = activation_repository
        self.audit_log_repository = audit_log_repository
        self.audit_log = audit_log
        self.clock = clock

    async def handle(self, command: ManageKeyCommand) -> ManageKeyResponseDTO:
        """
        Handle manage key command.

        Args:
            command: ManageKeyCommand

        Returns:
            ManageKeyResponseDTO describing the outcome

        Raises:
            LicenseKeyNotFoundError: If the key does not exist (including a
                repeated delete)
            InvalidStatusTransitionError: If the status change is not allowed
            InvalidAdminRequestError: If upgrade/downgrade parameters are invalid
        """
        license_key = await self.license_key_repository.find_by_id(command.license_key_id)
        if not license_key:
            raise LicenseKeyNotFoundError(f"License key {command.license_key_id} not found")

        actions = {
            KeyAction.REVOKE: self._revoke,
            KeyAction.ACTIVATE: self._reactivate,
            KeyAction.RESET: self._reset,
            KeyAction.UNBIND: self._unbind,
            KeyAction.DELETE: self._delete,
            KeyAction.UPGRADE: self._change_plan,
            KeyAction.DOWNGRADE: self._change_plan,
        }
        result = await actions[command.action](license_key, command, self.clock())

        metrics.admin_actions_total.labels(action=command.action.value).inc()
        logger.info("Admin %s on key %s: %s", command.action.value, license_key.id, result.message)
        return result

    async def _revoke(self, license_key, command, now):
        revoked = await self.license_key_repository.save(license_key.revoke())
        await self.audit_log.record_revoke(license_key)
        return ManageKeyResponseDTO(
            message=f"Key {license_key.key} revoked",
            license_key=LicenseKeyDTO.from_entity(revoked),
            previous=_snapshot(license_key),
        )

    async def _reactivate(self, license_key, command, now):
        reactivated = await self.license_key_repository.save(license_key.reactivate())
        await self.audit_log.record_reactivation(license_key)
        return ManageKeyResponseDTO(
            message=f"Key {license_key.key} re-activated",
            license_key=LicenseKeyDTO.from_entity(reactivated),
            previous=_snapshot(license_key),
        )

    async def _reset(self, license_key, command, now):
        live = await self.activation_repository.list_live_by_license_key(license_key.id)
        released = [
            await self.activation_repository.deactivate(activation, now=now)
            for activation in live
        ]
        reset = await self.license_key_repository.save(license_key.release())
        changed = (reset.status, reset.expires_at) != (license_key.status, license_key.expires_at)
        if released or changed:
            await self.audit_log.record_reset(license_key, released)
        return ManageKeyResponseDTO(
            message=f"Key {license_key.key} activations reset ({len(released)} released)",
            license_key=LicenseKeyDTO.from_entity(reset),
            previous=_snapshot(license_key),
        )

    async def _unbind(self, license_key, command, now):
        live = await self.activation_repository.find_live_by_license_key(license_key.id)
        if live is None:
            return ManageKeyResponseDTO(
                message=f"Key {license_key.key} is not bound to any machine",
                license_key=LicenseKeyDTO.from_entity(license_key),
            )

        released = await self.activation_repository.deactivate(live, now=now)
        unbound = await self.license_key_repository.save(license_key.release())
        await self.audit_log.record_unbind(license_key, released)
        return ManageKeyResponseDTO(
            message=(
                f"Key {license_key.key} unbound from {released.display_name}. "
                "The key can be used on a new machine."
            ),
            license_key=LicenseKeyDTO.from_entity(unbound),
            previous=_snapshot(license_key),
            unbound_machine=released.display_name,
        )

    async def _delete(self, license_key, command, now):
        activations_removed = await self.activation_repository.delete_by_license_key(
            license_key.id
        )
        await self.audit_log_repository.delete_by_license_key(license_key.id)
        await self.license_key_repository.delete(license_key.id)
        await self.audit_log.record_delete(license_key, activations_removed)
        return ManageKeyResponseDTO(
            message=f"Key {license_key.key} deleted",
            previous=_snapshot(license_key),
        )

    async def _change_plan(self, license_key, command, now: datetime):
        if command.tier is None:
            raise InvalidAdminRequestError("tier is required")
        if command.duration_days is not None and command.duration_days < 0:
            raise InvalidAdminRequestError("duration_days cannot be negative")
        if command.max_activations is not None and command.max_activations < 1:
            raise InvalidAdminRequestError("max_activations must be at least 1")

        window_start = now
        if command.duration_days:
            live = await self.activation_repository.list_live_by_license_key(license_key.id)
            if live:
                window_start = live[0].activated_at

        changed = await self.license_key_repository.save(
            license_key.change_plan(
                tier=command.tier,
                duration_days=command.duration_days,
                max_activations=command.max_activations,
                window_start=window_start,
            )
        )
        upgrade = command.action == KeyAction.UPGRADE
        verb = "upgraded" if upgrade else "downgraded"
        await self.audit_log.record_plan_change(license_key, changed, upgrade=upgrade)
        return ManageKeyResponseDTO(
            message=f"Key {license_key.key} {verb}: {license_key.tier.value} to {changed.tier.value}",
            license_key=LicenseKeyDTO.from_entity(changed),
            previous=_snapshot(license_key),
        )
