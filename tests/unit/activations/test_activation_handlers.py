"""
Unit tests for the activate, validate and deactivate handlers.
"""
from datetime import timedelta

import pytest

from activations.application.commands.activate_license import ActivateLicenseCommand
from activations.application.commands.deactivate_license import DeactivateLicenseCommand
from activations.application.commands.validate_license import ValidateLicenseCommand
from activations.application.handlers.activate_license_handler import ActivateLicenseHandler
from activations.application.handlers.deactivate_license_handler import (
    DeactivateLicenseHandler,
)
from audit.domain.entries import AuditAction
from core.domain.exceptions import (
    AlreadyBoundToOtherMachineError,
    KeyFormatError,
    KeySignatureError,
    LicenseExpiredError,
    LicenseKeyNotFoundError,
    LicenseRevokedError,
    NotActivatedError,
    SelfDeactivationNotAllowedError,
)
from core.domain.value_objects import LicenseStatus, LicenseTier
from licenses.application.commands.manage_key import KeyAction, ManageKeyCommand
from tests.fakes import RacingActivationRepository

MACHINE_A = "machine-aaaaaaaa-0001"
MACHINE_B = "machine-bbbbbbbb-0002"


def activate(key, machine_id=MACHINE_A, **kwargs):
    return ActivateLicenseCommand(license_key=key, machine_id=machine_id, **kwargs)


def validate(key, machine_id=MACHINE_A):
    return ValidateLicenseCommand(license_key=key, machine_id=machine_id, ip_address="10.0.0.7")


@pytest.mark.asyncio
class TestActivateLicenseHandler:
    """Tests for ActivateLicenseHandler."""

    async def test_first_activation_binds_key(
        self, activate_handler, stored_key, key_repo, activation_repo, audit_repo, clock
    ):
        """Test a fresh key is bound and marked used."""
        result = await activate_handler.handle(
            activate(stored_key.key, machine_name="Studio PC", app_version="2.1.0")
        )

        assert result.valid
        assert result.tier == "pro"
        assert result.days_remaining == 30
        assert result.expires_at == clock.now + timedelta(days=30)
        assert result.machine_id == MACHINE_A
        assert result.message
        assert key_repo.keys[stored_key.id].status == LicenseStatus.USED
        assert await activation_repo.count_live() == 1
        assert [entry.action for entry in audit_repo.entries] == [AuditAction.ACTIVATE]
        assert audit_repo.entries[0].details.machine_name == "Studio PC"

    async def test_key_is_normalized(self, activate_handler, stored_key):
        """Test lowercase input with whitespace is accepted."""
        result = await activate_handler.handle(activate(f"  {stored_key.key.lower()} "))
        assert result.valid

    async def test_same_machine_is_idempotent(
        self, activate_handler, stored_key, activation_repo, audit_repo, clock
    ):
        """Test re-activating from the bound machine refreshes the binding."""
        first = await activate_handler.handle(activate(stored_key.key))
        clock.advance(timedelta(days=2))

        second = await activate_handler.handle(activate(stored_key.key, app_version="2.2.0"))

        live = await activation_repo.find_live_by_license_key(stored_key.id)
        assert second.activated_at == first.activated_at
        assert second.message is None
        assert second.days_remaining == 28
        assert live.last_seen_at == clock.now
        assert live.app_version == "2.2.0"
        assert await activation_repo.count_live() == 1
        assert len(audit_repo.entries) == 1

    async def test_defaults_for_missing_diagnostics(self, activate_handler, stored_key, activation_repo):
        """Test machine name and app version default to Unknown."""
        await activate_handler.handle(activate(stored_key.key))

        live = await activation_repo.find_live_by_license_key(stored_key.id)
        assert live.machine_name == "Unknown"
        assert live.app_version == "Unknown"

    async def test_other_machine_is_rejected(self, activate_handler, stored_key, activation_repo):
        """Test a bound key cannot move to another machine."""
        await activate_handler.handle(activate(stored_key.key))

        with pytest.raises(AlreadyBoundToOtherMachineError) as exc_info:
            await activate_handler.handle(activate(stored_key.key, machine_id=MACHINE_B))

        assert exc_info.value.bound_to == "machine-..."
        live = await activation_repo.find_live_by_license_key(stored_key.id)
        assert live.is_for(MACHINE_A)

    async def test_admin_unbind_frees_key(self, activate_handler, manage_handler, stored_key):
        """Test another machine can bind once an admin unbinds the key."""
        await activate_handler.handle(activate(stored_key.key))
        await manage_handler.handle(ManageKeyCommand(stored_key.id, KeyAction.UNBIND))

        result = await activate_handler.handle(activate(stored_key.key, machine_id=MACHINE_B))

        assert result.machine_id == MACHINE_B

    async def test_imports_unseen_signed_key(self, activate_handler, codec, key_repo):
        """Test correctly signed keys activate without pre-registration."""
        key = codec.generate(LicenseTier.ENTERPRISE, 365)

        result = await activate_handler.handle(activate(key))

        stored = await key_repo.find_by_key(key)
        assert result.tier == "enterprise"
        assert stored.duration_days == 365
        assert stored.status == LicenseStatus.USED

    async def test_forged_key_is_rejected(self, activate_handler, key_repo):
        """Test unknown keys with a bad signature create nothing."""
        with pytest.raises(KeySignatureError):
            await activate_handler.handle(activate("ABCD-EFGH-P1AX-0000"))
        assert key_repo.keys == {}

    async def test_malformed_key(self, activate_handler):
        """Test malformed keys are rejected before lookup."""
        with pytest.raises(KeyFormatError):
            await activate_handler.handle(activate("ABCD-1234"))

    async def test_revoked_then_reactivated(self, activate_handler, manage_handler, stored_key):
        """Test revoke blocks activation until an admin re-activates the key."""
        await activate_handler.handle(activate(stored_key.key))
        await manage_handler.handle(ManageKeyCommand(stored_key.id, KeyAction.REVOKE))

        with pytest.raises(LicenseRevokedError):
            await activate_handler.handle(activate(stored_key.key))

        await manage_handler.handle(ManageKeyCommand(stored_key.id, KeyAction.ACTIVATE))
        result = await activate_handler.handle(activate(stored_key.key))
        assert result.valid

    async def test_same_machine_after_window_expires(
        self, activate_handler, stored_key, key_repo, clock
    ):
        """Test re-activation past the window marks the key expired."""
        await activate_handler.handle(activate(stored_key.key))
        clock.advance(timedelta(days=31))

        with pytest.raises(LicenseExpiredError):
            await activate_handler.handle(activate(stored_key.key))

        assert key_repo.keys[stored_key.id].status == LicenseStatus.EXPIRED
        with pytest.raises(LicenseExpiredError):
            await activate_handler.handle(activate(stored_key.key))

    async def test_elapsed_admin_deadline_blocks_new_binding(
        self, activate_handler, manage_handler, stored_key, key_repo, activation_repo, clock
    ):
        """Test a key whose admin-set deadline has passed cannot be bound."""
        await manage_handler.handle(
            ManageKeyCommand(
                stored_key.id, KeyAction.UPGRADE, tier=LicenseTier.PRO, duration_days=3
            )
        )
        clock.advance(timedelta(days=10))

        with pytest.raises(LicenseExpiredError):
            await activate_handler.handle(activate(stored_key.key))

        assert key_repo.keys[stored_key.id].status == LicenseStatus.EXPIRED
        assert await activation_repo.find_live_by_license_key(stored_key.id) is None

    async def test_new_binding_never_reports_elapsed_window(
        self, activate_handler, manage_handler, stored_key, clock
    ):
        """Test a binding inside an admin deadline reports the days left."""
        await manage_handler.handle(
            ManageKeyCommand(
                stored_key.id, KeyAction.UPGRADE, tier=LicenseTier.PRO, duration_days=7
            )
        )
        clock.advance(timedelta(days=5))

        result = await activate_handler.handle(activate(stored_key.key))

        assert result.valid
        assert result.days_remaining == 2

    async def test_concurrent_bind_from_other_machine(
        self, codec, key_repo, audit_log, clock, stored_key
    ):
        """Test losing the insert race to another machine."""
        handler = ActivateLicenseHandler(
            key_codec=codec,
            license_key_repository=key_repo,
            activation_repository=RacingActivationRepository(MACHINE_B),
            audit_log=audit_log,
            clock=clock,
        )

        with pytest.raises(AlreadyBoundToOtherMachineError):
            await handler.handle(activate(stored_key.key))

    async def test_concurrent_bind_from_same_machine(
        self, codec, key_repo, audit_log, audit_repo, clock, stored_key
    ):
        """Test a duplicate request from the same machine converges."""
        repository = RacingActivationRepository(MACHINE_A)
        handler = ActivateLicenseHandler(
            key_codec=codec,
            license_key_repository=key_repo,
            activation_repository=repository,
            audit_log=audit_log,
            clock=clock,
        )

        result = await handler.handle(activate(stored_key.key))

        assert result.valid
        assert await repository.count_live() == 1
        assert audit_repo.entries == []


@pytest.mark.asyncio
class TestValidateLicenseHandler:
    """Tests for ValidateLicenseHandler."""

    async def test_heartbeat(self, activate_handler, validate_handler, stored_key, activation_repo, clock):
        """Test validate refreshes last_seen_at and reports time left."""
        await activate_handler.handle(activate(stored_key.key))
        clock.advance(timedelta(days=10))

        result = await validate_handler.handle(validate(stored_key.key))

        live = await activation_repo.find_live_by_license_key(stored_key.id)
        assert result.days_remaining == 20
        assert live.last_seen_at == clock.now
        assert live.ip_address == "10.0.0.7"

    async def test_expired_after_window(
        self, activate_handler, validate_handler, stored_key, key_repo, clock
    ):
        """Test validate at T+31d for a 30-day key."""
        await activate_handler.handle(activate(stored_key.key))
        clock.advance(timedelta(days=31))

        with pytest.raises(LicenseExpiredError):
            await validate_handler.handle(validate(stored_key.key))

        assert key_repo.keys[stored_key.id].status == LicenseStatus.EXPIRED

    async def test_lifetime_key(self, activate_handler, validate_handler, codec, clock):
        """Test lifetime keys stay valid indefinitely."""
        key = codec.generate(LicenseTier.PRO, 0)
        await activate_handler.handle(activate(key))
        clock.advance(timedelta(days=3650))

        result = await validate_handler.handle(validate(key))

        assert result.expires_at is None
        assert result.days_remaining == -1

    async def test_not_activated_on_machine(self, activate_handler, validate_handler, stored_key):
        """Test validate from a machine without the binding."""
        await activate_handler.handle(activate(stored_key.key))

        with pytest.raises(NotActivatedError):
            await validate_handler.handle(validate(stored_key.key, machine_id=MACHINE_B))

    async def test_unseen_signed_key_is_not_imported(self, validate_handler, codec, key_repo):
        """Test validate never creates key rows."""
        with pytest.raises(LicenseKeyNotFoundError):
            await validate_handler.handle(validate(codec.generate(LicenseTier.PRO, 30)))
        assert key_repo.keys == {}

    async def test_forged_key(self, validate_handler):
        """Test validate rejects forged unknown keys."""
        with pytest.raises(KeySignatureError):
            await validate_handler.handle(validate("ABCD-EFGH-P1AX-0000"))

    async def test_revoked_key(self, activate_handler, validate_handler, manage_handler, stored_key):
        """Test validate rejects revoked keys."""
        await activate_handler.handle(activate(stored_key.key))
        await manage_handler.handle(ManageKeyCommand(stored_key.id, KeyAction.REVOKE))

        with pytest.raises(LicenseRevokedError):
            await validate_handler.handle(validate(stored_key.key))


@pytest.mark.asyncio
class TestDeactivateLicenseHandler:
    """Tests for DeactivateLicenseHandler."""

    async def test_always_refused(self):
        """Test end users can never release a binding."""
        with pytest.raises(SelfDeactivationNotAllowedError):
            await DeactivateLicenseHandler().handle(
                DeactivateLicenseCommand(license_key="ABCD-EFGH-P1AX-0000", machine_id=MACHINE_A)
            )
