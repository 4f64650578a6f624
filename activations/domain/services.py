"""
Activation domain services.

Domain services contain business logic that doesn't naturally
fit within a single entity.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from activations.domain.activation import Activation
from activations.ports.activation_repository import ActivationRepository
from core.domain.exceptions import (
    AlreadyBoundToOtherMachineError,
    DuplicateLicenseKeyError,
    KeyFormatError,
    KeySignatureError,
    LicenseExpiredError,
    LicenseKeyNotFoundError,
    LicenseRevokedError,
    LiveActivationExistsError,
    StorageError,
)
from core import metrics
from core.domain.value_objects import LicenseStatus
from licenses.domain.expiry import ExpiryCalculator, ExpiryWindow
from licenses.domain.key_codec import KeyCodec, is_valid_format, normalize_key
from licenses.domain.license_key import LicenseKey
from licenses.ports.license_key_repository import LicenseKeyRepository

logger = logging.getLogger(__name__)


class LicenseKeyAdmission:
    """Domain service for the key checks shared by activate and validate."""

    @staticmethod
    def parse(raw_key: str) -> str:
        """
        Normalize a raw key and check its shape.

        Raises:
            KeyFormatError: If the key does not match XXXX-XXXX-XXXX-XXXX
        """
        key = normalize_key(raw_key)
        if not is_valid_format(key):
            raise KeyFormatError()
        return key

    @staticmethod
    async def find_or_import(
        key: str,
        codec: KeyCodec,
        repository: LicenseKeyRepository,
        now: Optional[datetime] = None,
    ) -> LicenseKey:
        """
        Find a stored key, importing it if it is unseen but correctly signed.

        Args:
            key: Normalized key string
            codec: Codec holding the signing secret
            repository: License key repository
            now: Import time

        Returns:
            Stored LicenseKey entity

        Raises:
            KeySignatureError: If the key is unseen and not correctly signed
        """
        license_key = await repository.find_by_key(key)
        if license_key:
            return license_key

        verification = codec.verify(key)
        if not verification.valid:
            logger.warning("Rejected unknown key %s...: %s", key[:4], verification.reason)
            raise KeySignatureError()

        imported = LicenseKey.create(
            key=key,
            tier=verification.tier,
            duration_days=verification.duration_days,
            now=now,
        )
        try:
            stored = await repository.insert(imported)
        except DuplicateLicenseKeyError:
            # Imported concurrently by another request.
            stored = await repository.find_by_key(key)
            if stored is None:
                raise StorageError()
            return stored

        metrics.license_keys_imported_total.labels(tier=stored.tier.value).inc()
        logger.info("Imported signed key %s (%s)", stored.id, stored.tier.value)
        return stored

    @staticmethod
    async def find_existing(
        key: str,
        codec: KeyCodec,
        repository: LicenseKeyRepository,
    ) -> LicenseKey:
        """
        Find a stored key without importing it.

        Raises:
            KeySignatureError: If the key is unknown and forged
            LicenseKeyNotFoundError: If the key is correctly signed but unseen
        """
        license_key = await repository.find_by_key(key)
        if license_key:
            return license_key
        if not codec.verify(key).valid:
            raise KeySignatureError()
        raise LicenseKeyNotFoundError("License key not found. Activate it first.")

    @staticmethod
    def ensure_usable(license_key: LicenseKey) -> None:
        """
        Reject revoked and expired keys.

        Raises:
            LicenseRevokedError: If the key was revoked by an admin
            LicenseExpiredError: If the key is marked expired
        """
        if license_key.status == LicenseStatus.REVOKED:
            raise LicenseRevokedError()
        if license_key.status == LicenseStatus.EXPIRED:
            raise LicenseExpiredError()


@dataclass(frozen=True)
class Binding:
    """Outcome of a successful bind."""

    license_key: LicenseKey
    activation: Activation
    window: ExpiryWindow
    created: bool


class BindingManager:
    """Domain service enforcing one live activation per key."""

    @staticmethod
    async def expire_if_elapsed(
        license_key: LicenseKey,
        activation: Activation,
        repository: LicenseKeyRepository,
        now: Optional[datetime] = None,
    ) -> ExpiryWindow:
        """
        Compute the window and mark the key expired once it has closed.

        Raises:
            LicenseExpiredError: If the window has elapsed
        """
        window = ExpiryCalculator.for_key(license_key, activation, now)
        await BindingManager._reject_elapsed(license_key, window, repository)
        return window

    @staticmethod
    async def _reject_elapsed(
        license_key: LicenseKey, window: ExpiryWindow, repository: LicenseKeyRepository
    ) -> None:
        if window.has_elapsed:
            await repository.save(license_key.mark_expired())
            logger.info("License key %s expired at %s", license_key.id, window.expires_at)
            raise LicenseExpiredError(
                f"License expired on {window.expires_at.date().isoformat()}"
            )

    @staticmethod
    async def bind(
        license_key: LicenseKey,
        machine_id: str,
        activation_repository: ActivationRepository,
        license_key_repository: LicenseKeyRepository,
        machine_name: Optional[str] = None,
        app_version: Optional[str] = None,
        ip_address: Optional[str] = None,
        attempts: int = 3,
        now: Optional[datetime] = None,
    ) -> Binding:
        """
        Bind a key to a machine, or refresh the existing same-machine binding.

        The check-then-insert below can race with another request; the
        repository rejects a second live row and the read path is retried.

        Args:
            license_key: Usable license key
            machine_id: Requesting machine
            activation_repository: Activation repository
            license_key_repository: License key repository
            machine_name: Optional display name of the machine
            app_version: Optional client version
            ip_address: Optional caller IP
            attempts: Read/insert rounds before giving up
            now: Reference time

        Returns:
            Binding with the live activation and its expiry window

        Raises:
            AlreadyBoundToOtherMachineError: If another machine holds the key
            LicenseExpiredError: If the window has elapsed, including an
                admin-set deadline on a key with no binding
            StorageError: If no consistent state was read after retries
        """
        for _ in range(attempts):
            live = await activation_repository.find_live_by_license_key(license_key.id)

            if live is None:
                deadline = ExpiryCalculator.admin_deadline(license_key, now)
                if deadline is not None:
                    await BindingManager._reject_elapsed(
                        license_key, deadline, license_key_repository
                    )
                try:
                    activation = await activation_repository.insert(
                        Activation.create(
                            license_key_id=license_key.id,
                            machine_id=machine_id,
                            machine_name=machine_name,
                            app_version=app_version,
                            ip_address=ip_address,
                            now=now,
                        )
                    )
                except LiveActivationExistsError:
                    metrics.binding_conflicts_total.inc()
                    logger.info(
                        "Concurrent bind on key %s, re-reading live activation",
                        license_key.id,
                    )
                    continue

                bound_key = await license_key_repository.save(license_key.mark_used())
                window = await BindingManager.expire_if_elapsed(
                    bound_key, activation, license_key_repository, now
                )
                return Binding(bound_key, activation, window, created=True)

            if not live.is_for(machine_id):
                raise AlreadyBoundToOtherMachineError(bound_to=live.machine_id.masked())

            window = await BindingManager.expire_if_elapsed(
                license_key, live, license_key_repository, now
            )
            refreshed = await activation_repository.save(
                live.heartbeat(
                    ip_address=ip_address,
                    app_version=app_version,
                    machine_name=machine_name,
                    now=now,
                )
            )
            return Binding(license_key, refreshed, window, created=False)

        logger.error("Could not settle binding for key %s after %s attempts", license_key.id, attempts)
        raise StorageError()
