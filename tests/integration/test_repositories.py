"""
Integration tests for repository implementations.
"""

import uuid
from datetime import timedelta

import pytest
from asgiref.sync import async_to_sync

from activations.domain.activation import Activation
from audit.domain.entries import (
    AuditAction,
    AuditLogEntry,
    DeleteDetails,
    RevokeDetails,
    UnbindDetails,
)
from core.domain.exceptions import DuplicateLicenseKeyError, LiveActivationExistsError
from core.domain.value_objects import LicenseStatus, LicenseTier
from licenses.application.handlers.list_keys_handler import ListKeysHandler
from licenses.application.queries.list_keys import ListKeysQuery
from licenses.domain.license_key import LicenseKey


@pytest.mark.django_db
@pytest.mark.integration
class TestLicenseKeyRepository:
    """Integration tests for LicenseKeyRepository."""

    def test_insert_and_find(self, license_key_repository, codec):
        """Test inserting and finding a key by id and by string."""
        key = LicenseKey.create(
            key=codec.generate(LicenseTier.ENTERPRISE, 90),
            tier=LicenseTier.ENTERPRISE,
            duration_days=90,
            max_activations=2,
            notes="partner",
        )

        async_to_sync(license_key_repository.insert)(key)

        by_id = async_to_sync(license_key_repository.find_by_id)(key.id)
        by_key = async_to_sync(license_key_repository.find_by_key)(key.key)
        assert by_id == by_key
        assert by_id.tier == LicenseTier.ENTERPRISE
        assert by_id.duration_days == 90
        assert by_id.max_activations == 2
        assert by_id.notes == "partner"
        assert by_id.status == LicenseStatus.ACTIVE

    def test_find_not_found(self, license_key_repository):
        """Test finding a missing key."""
        assert async_to_sync(license_key_repository.find_by_id)(uuid.uuid4()) is None
        assert async_to_sync(license_key_repository.find_by_key)("AAAA-BBBB-CCCC-DDDD") is None

    def test_duplicate_key_string(self, license_key_repository, db_license_key):
        """Test the unique key constraint surfaces as a domain error."""
        clone = LicenseKey.create(key=db_license_key.key, tier=LicenseTier.PRO)

        with pytest.raises(DuplicateLicenseKeyError):
            async_to_sync(license_key_repository.insert)(clone)

    def test_save_updates_status(self, license_key_repository, db_license_key):
        """Test saving a changed entity."""
        async_to_sync(license_key_repository.save)(db_license_key.mark_used().revoke())

        stored = async_to_sync(license_key_repository.find_by_id)(db_license_key.id)
        assert stored.status == LicenseStatus.REVOKED

    def test_save_plan_change(self, license_key_repository, db_license_key):
        """Test expires_at round trips through the database."""
        changed = db_license_key.change_plan(
            LicenseTier.ENTERPRISE, duration_days=365, window_start=db_license_key.created_at
        )

        async_to_sync(license_key_repository.save)(changed)

        stored = async_to_sync(license_key_repository.find_by_id)(db_license_key.id)
        assert stored.expires_at == db_license_key.created_at + timedelta(days=365)
        assert stored.tier == LicenseTier.ENTERPRISE

    def test_list_and_count(self, license_key_repository, codec):
        """Test listing newest first and counting by status and tier."""
        first = LicenseKey.create(key=codec.generate(LicenseTier.PRO), tier=LicenseTier.PRO)
        second = LicenseKey.create(
            key=codec.generate(LicenseTier.ENTERPRISE),
            tier=LicenseTier.ENTERPRISE,
            now=first.created_at + timedelta(seconds=1),
        )
        async_to_sync(license_key_repository.insert)(first)
        async_to_sync(license_key_repository.insert)(second)
        async_to_sync(license_key_repository.save)(first.revoke())

        listed = async_to_sync(license_key_repository.list_all)()

        assert [key.id for key in listed] == [second.id, first.id]
        assert async_to_sync(license_key_repository.count_by)("status") == {
            "active": 1,
            "revoked": 1,
        }
        assert async_to_sync(license_key_repository.count_by)("tier") == {
            "pro": 1,
            "enterprise": 1,
        }

    def test_count_by_rejects_other_fields(self, license_key_repository):
        """Test only status and tier can be grouped."""
        with pytest.raises(ValueError):
            async_to_sync(license_key_repository.count_by)("notes")

    def test_delete(self, license_key_repository, db_license_key):
        """Test deleting a key."""
        assert async_to_sync(license_key_repository.delete)(db_license_key.id) is True
        assert async_to_sync(license_key_repository.delete)(db_license_key.id) is False


@pytest.mark.django_db
@pytest.mark.integration
class TestActivationRepository:
    """Integration tests for ActivationRepository."""

    def test_insert_and_find_live(self, activation_repository, db_license_key):
        """Test inserting and finding the live activation."""
        activation = Activation.create(
            license_key_id=db_license_key.id,
            machine_id="machine-0001",
            machine_name="Laptop",
            ip_address="192.0.2.10",
        )

        async_to_sync(activation_repository.insert)(activation)

        live = async_to_sync(activation_repository.find_live_by_license_key)(db_license_key.id)
        assert live == activation
        on_machine = async_to_sync(activation_repository.find_live_by_license_key_and_machine)(
            db_license_key.id, "machine-0001"
        )
        assert on_machine == activation
        other = async_to_sync(activation_repository.find_live_by_license_key_and_machine)(
            db_license_key.id, "machine-0002"
        )
        assert other is None

    def test_one_live_activation_per_key(self, activation_repository, db_license_key):
        """Test the partial unique constraint rejects a second live row."""
        async_to_sync(activation_repository.insert)(
            Activation.create(license_key_id=db_license_key.id, machine_id="machine-0001")
        )

        with pytest.raises(LiveActivationExistsError):
            async_to_sync(activation_repository.insert)(
                Activation.create(license_key_id=db_license_key.id, machine_id="machine-0002")
            )

        assert async_to_sync(activation_repository.count_live)() == 1

    def test_deactivate_allows_new_binding(self, activation_repository, db_license_key):
        """Test released rows do not count towards the constraint."""
        first = async_to_sync(activation_repository.insert)(
            Activation.create(license_key_id=db_license_key.id, machine_id="machine-0001")
        )

        released = async_to_sync(activation_repository.deactivate)(first)
        async_to_sync(activation_repository.insert)(
            Activation.create(license_key_id=db_license_key.id, machine_id="machine-0002")
        )

        assert released.deactivated_at is not None
        live = async_to_sync(activation_repository.list_live_by_license_key)(db_license_key.id)
        assert [activation.machine_id.value for activation in live] == ["machine-0002"]

    def test_save_heartbeat(self, activation_repository, db_license_key):
        """Test heartbeat fields are updated."""
        activation = async_to_sync(activation_repository.insert)(
            Activation.create(license_key_id=db_license_key.id, machine_id="machine-0001")
        )
        seen = activation.last_seen_at + timedelta(hours=3)

        async_to_sync(activation_repository.save)(
            activation.heartbeat(ip_address="198.51.100.4", app_version="3.0.0", now=seen)
        )

        live = async_to_sync(activation_repository.find_live_by_license_key)(db_license_key.id)
        assert live.last_seen_at == seen
        assert live.app_version == "3.0.0"
        assert live.ip_address == "198.51.100.4"
        assert live.activated_at == activation.activated_at

    def test_delete_by_license_key(self, activation_repository, db_license_key):
        """Test deleting every activation of a key."""
        first = async_to_sync(activation_repository.insert)(
            Activation.create(license_key_id=db_license_key.id, machine_id="machine-0001")
        )
        async_to_sync(activation_repository.deactivate)(first)
        async_to_sync(activation_repository.insert)(
            Activation.create(license_key_id=db_license_key.id, machine_id="machine-0002")
        )

        assert async_to_sync(activation_repository.delete_by_license_key)(db_license_key.id) == 2

    def test_list_live_by_license_keys(
        self, activation_repository, license_key_repository, db_license_key, codec
    ):
        """Test live activations of many keys are grouped by key."""
        unbound = async_to_sync(license_key_repository.insert)(
            LicenseKey.create(key=codec.generate(LicenseTier.PRO, 7), tier=LicenseTier.PRO)
        )
        released = async_to_sync(activation_repository.insert)(
            Activation.create(license_key_id=db_license_key.id, machine_id="machine-0001")
        )
        async_to_sync(activation_repository.deactivate)(released)
        live = async_to_sync(activation_repository.insert)(
            Activation.create(license_key_id=db_license_key.id, machine_id="machine-0002")
        )

        grouped = async_to_sync(activation_repository.list_live_by_license_keys)(
            [db_license_key.id, unbound.id]
        )

        assert grouped == {db_license_key.id: [live]}


@pytest.mark.django_db
@pytest.mark.integration
class TestListKeysQueries:
    """Tests for the number of queries behind the key listing."""

    def test_query_count_does_not_grow_with_keys(
        self, license_key_repository, activation_repository, codec, django_assert_num_queries
    ):
        """Test listing keys uses one query for keys and one for bindings."""
        for index in range(3):
            stored = async_to_sync(license_key_repository.insert)(
                LicenseKey.create(key=codec.generate(LicenseTier.PRO, 30), tier=LicenseTier.PRO)
            )
            async_to_sync(activation_repository.insert)(
                Activation.create(license_key_id=stored.id, machine_id=f"machine-000{index}")
            )
        handler = ListKeysHandler(license_key_repository, activation_repository)

        with django_assert_num_queries(2):
            items = async_to_sync(handler.handle)(ListKeysQuery())

        assert [item.activation_count for item in items] == [1, 1, 1]


@pytest.mark.django_db
@pytest.mark.integration
class TestAuditLogRepository:
    """Integration tests for AuditLogRepository."""

    def test_append_and_list(self, audit_log_repository, db_license_key):
        """Test entries are listed newest first with their key."""
        older = AuditLogEntry.create(db_license_key.id, RevokeDetails(previous_status="used"))
        newer = AuditLogEntry.create(
            db_license_key.id,
            UnbindDetails(unbound_machine="Laptop", previous_status="used"),
            machine_id="machine-0001",
            now=older.created_at + timedelta(seconds=1),
        )
        async_to_sync(audit_log_repository.append)(older)
        async_to_sync(audit_log_repository.append)(newer)

        views = async_to_sync(audit_log_repository.list)()

        assert [view.entry.id for view in views] == [newer.id, older.id]
        assert views[0].entry.details == UnbindDetails(
            unbound_machine="Laptop", previous_status="used"
        )
        assert views[0].license_key == db_license_key.key
        assert views[0].tier == "pro"
        assert views[0].key_status == "active"

    def test_filters(self, audit_log_repository, db_license_key):
        """Test key, action and limit filters."""
        for _ in range(3):
            async_to_sync(audit_log_repository.append)(
                AuditLogEntry.create(db_license_key.id, RevokeDetails(previous_status="active"))
            )

        assert len(async_to_sync(audit_log_repository.list)(limit=2)) == 2
        assert (
            async_to_sync(audit_log_repository.list)(action=AuditAction.ADMIN_UNBIND) == []
        )
        assert async_to_sync(audit_log_repository.list)(license_key_id=uuid.uuid4()) == []

    def test_keyless_entry(self, audit_log_repository):
        """Test entries without a key are stored and listed."""
        entry = AuditLogEntry.create(
            None, DeleteDetails(license_key="AAAA-BBBB-PLAX-0000", tier="pro", activations_removed=0)
        )

        async_to_sync(audit_log_repository.append)(entry)

        view = async_to_sync(audit_log_repository.list)()[0]
        assert view.license_key is None
        assert view.entry.details.license_key == "AAAA-BBBB-PLAX-0000"

    def test_delete_by_license_key(self, audit_log_repository, db_license_key):
        """Test deleting a key's history."""
        async_to_sync(audit_log_repository.append)(
            AuditLogEntry.create(db_license_key.id, RevokeDetails(previous_status="active"))
        )

        assert async_to_sync(audit_log_repository.delete_by_license_key)(db_license_key.id) == 1
