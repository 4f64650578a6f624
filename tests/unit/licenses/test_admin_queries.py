"""
Unit tests for key generation, listing and stats handlers.
"""
from datetime import timedelta

import pytest

from activations.application.commands.activate_license import ActivateLicenseCommand
from core.domain.exceptions import DuplicateLicenseKeyError, InvalidAdminRequestError
from core.domain.value_objects import LicenseTier
from licenses.application.commands.generate_keys import GenerateKeysCommand
from licenses.application.handlers.generate_keys_handler import GenerateKeysHandler
from licenses.application.handlers.license_stats_handler import GetLicenseStatsHandler
from licenses.application.handlers.list_keys_handler import ListKeysHandler
from licenses.application.queries.get_license_stats import GetLicenseStatsQuery
from licenses.application.queries.list_keys import ListKeysQuery
from tests.fakes import InMemoryLicenseKeyRepository


@pytest.fixture
def generate_handler(codec, key_repo, clock):
    return GenerateKeysHandler(
        key_codec=codec, license_key_repository=key_repo, max_keys_per_request=50, clock=clock
    )


class CollidingLicenseKeyRepository(InMemoryLicenseKeyRepository):
    """Rejects the first insert as a duplicate."""

    def __init__(self):
        super().__init__()
        self.collisions = 1

    async def insert(self, license_key):
        if self.collisions:
            self.collisions -= 1
            raise DuplicateLicenseKeyError()
        return await super().insert(license_key)


@pytest.mark.asyncio
class TestGenerateKeysHandler:
    """Tests for GenerateKeysHandler."""

    async def test_generate(self, generate_handler, codec, key_repo):
        """Test generated keys are stored and verify."""
        result = await generate_handler.handle(
            GenerateKeysCommand(
                tier=LicenseTier.ENTERPRISE, count=3, duration_days=90, notes="Q1 batch"
            )
        )

        assert result.message == "Generated 3 key(s) (90 days)"
        assert len(result.keys) == 3
        assert len(key_repo.keys) == 3
        for dto in result.keys:
            verification = codec.verify(dto.key)
            assert verification.valid
            assert verification.tier == LicenseTier.ENTERPRISE
            assert dto.duration_days == 90
            assert dto.status == "active"
            assert dto.notes == "Q1 batch"
            assert dto.expires_at is None

    async def test_lifetime_label(self, generate_handler):
        """Test lifetime keys are labelled as such."""
        result = await generate_handler.handle(GenerateKeysCommand())
        assert result.message == "Generated 1 key(s) (lifetime)"

    async def test_duration_is_floored(self, generate_handler):
        """Test requested durations are floored to a bucket."""
        result = await generate_handler.handle(GenerateKeysCommand(duration_days=100))
        assert result.keys[0].duration_days == 90

    @pytest.mark.parametrize("requested,issued", [(0, 1), (-4, 1), (500, 50)])
    async def test_count_is_clamped(self, generate_handler, requested, issued):
        """Test count is clamped to 1..50."""
        result = await generate_handler.handle(GenerateKeysCommand(count=requested))
        assert len(result.keys) == issued

    async def test_negative_duration(self, generate_handler):
        """Test negative durations are rejected."""
        with pytest.raises(InvalidAdminRequestError):
            await generate_handler.handle(GenerateKeysCommand(duration_days=-1))

    async def test_zero_max_activations(self, generate_handler):
        """Test max_activations below 1 is rejected."""
        with pytest.raises(InvalidAdminRequestError):
            await generate_handler.handle(GenerateKeysCommand(max_activations=0))

    async def test_collision_is_retried(self, codec, clock):
        """Test a colliding key string is regenerated."""
        repository = CollidingLicenseKeyRepository()
        handler = GenerateKeysHandler(key_codec=codec, license_key_repository=repository, clock=clock)

        result = await handler.handle(GenerateKeysCommand(count=2))

        assert len(result.keys) == 2
        assert len(repository.keys) == 2


@pytest.mark.asyncio
class TestListKeysHandler:
    """Tests for ListKeysHandler."""

    async def test_list_with_binding(
        self, generate_handler, activate_handler, key_repo, activation_repo, clock
    ):
        """Test keys are listed newest first with their binding summary."""
        older = await generate_handler.handle(GenerateKeysCommand(duration_days=30))
        clock.advance(timedelta(minutes=5))
        newer = await generate_handler.handle(GenerateKeysCommand(duration_days=7))
        await activate_handler.handle(
            ActivateLicenseCommand(
                license_key=older.keys[0].key, machine_id="machine-1", machine_name="Laptop"
            )
        )

        items = await ListKeysHandler(key_repo, activation_repo).handle(ListKeysQuery())

        assert [item.key for item in items] == [newer.keys[0].key, older.keys[0].key]
        assert items[0].activation_count == 0
        assert items[0].last_machine is None
        assert items[1].activation_count == 1
        assert items[1].last_machine.machine_name == "Laptop"
        assert items[1].status == "used"


@pytest.mark.asyncio
class TestGetLicenseStatsHandler:
    """Tests for GetLicenseStatsHandler."""

    async def test_stats(
        self, generate_handler, activate_handler, key_repo, activation_repo, audit_repo
    ):
        """Test counts by status and tier with recent activity."""
        pro = await generate_handler.handle(GenerateKeysCommand(count=2))
        await generate_handler.handle(GenerateKeysCommand(tier=LicenseTier.ENTERPRISE))
        await activate_handler.handle(
            ActivateLicenseCommand(license_key=pro.keys[0].key, machine_id="machine-1")
        )

        stats = await GetLicenseStatsHandler(key_repo, activation_repo, audit_repo).handle(
            GetLicenseStatsQuery()
        )

        assert stats.licenses == {
            "active": 2,
            "used": 1,
            "revoked": 0,
            "expired": 0,
            "total": 3,
        }
        assert stats.tiers == {"pro": 2, "enterprise": 1}
        assert stats.active_machines == 1
        assert [entry.action for entry in stats.recent_activity] == ["activate"]
        assert stats.recent_activity[0].license_key == pro.keys[0].key
