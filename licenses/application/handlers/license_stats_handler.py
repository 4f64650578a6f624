"""
GetLicenseStatsHandler.

Handler for the admin dashboard counters.
"""

from activations.ports.activation_repository import ActivationRepository
from audit.application.dto.audit_dto import AuditLogEntryDTO
from audit.ports.audit_log_repository import AuditLogRepository
from core import metrics
from core.domain.value_objects import LicenseStatus, LicenseTier
from licenses.application.dto.license_dto import LicenseStatsDTO
from licenses.application.queries.get_license_stats import GetLicenseStatsQuery
from licenses.ports.license_key_repository import LicenseKeyRepository


class GetLicenseStatsHandler:
    """Handler for GetLicenseStatsQuery."""

    def __init__(
        self,
        license_key_repository: LicenseKeyRepository,
        activation_repository: ActivationRepository,
        audit_log_repository: AuditLogRepository,
    ):
        """Initialize handler with repositories."""
        self.license_key_repository = license_key_repository
        self.activation_repository = activation_repository
        self.audit_log_repository = audit_log_repository

    async def handle(self, query: GetLicenseStatsQuery) -> LicenseStatsDTO:
        """
        Handle license stats query.

        Args:
            query: GetLicenseStatsQuery

        Returns:
            LicenseStatsDTO with a count for every status and tier
        """
        by_status = await self.license_key_repository.count_by("status")
        by_tier = await self.license_key_repository.count_by("tier")
        live = await self.activation_repository.count_live()
        recent = await self.audit_log_repository.list(limit=query.recent_activity_limit)

        metrics.live_activations.set(live)

        licenses = {status.value: by_status.get(status.value, 0) for status in LicenseStatus}
        licenses["total"] = sum(licenses.values())
        return LicenseStatsDTO(
            licenses=licenses,
            tiers={tier.value: by_tier.get(tier.value, 0) for tier in LicenseTier},
            active_machines=live,
            recent_activity=[AuditLogEntryDTO.from_view(view) for view in recent],
        )
