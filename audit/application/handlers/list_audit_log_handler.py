"""
ListAuditLogHandler.

Handler for browsing the audit trail from the admin panel.
"""

from typing import List

from audit.application.dto.audit_dto import AuditLogEntryDTO
from audit.application.queries.list_audit_log import ListAuditLogQuery
from audit.ports.audit_log_repository import AuditLogRepository


class ListAuditLogHandler:
    """Handler for ListAuditLogQuery."""

    def __init__(
        self,
        audit_log_repository: AuditLogRepository,
        default_limit: int = 50,
        max_limit: int = 200,
    ):
        """Initialize handler with repository and paging limits."""
        self.audit_log_repository = audit_log_repository
        self.default_limit = default_limit
        self.max_limit = max_limit

    async def handle(self, query: ListAuditLogQuery) -> List[AuditLogEntryDTO]:
        """
        Handle list audit log query.

        Args:
            query: ListAuditLogQuery; a missing or non-positive limit uses
                the default, larger limits are capped

        Returns:
            List of AuditLogEntryDTO, newest first
        """
        limit = query.limit if query.limit and query.limit > 0 else self.default_limit
        views = await self.audit_log_repository.list(
            license_key_id=query.license_key_id,
            action=query.action,
            limit=min(limit, self.max_limit),
        )
        return [AuditLogEntryDTO.from_view(view) for view in views]
