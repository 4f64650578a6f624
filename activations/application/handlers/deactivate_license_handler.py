"""
DeactivateLicenseHandler.

End users cannot release their own binding; only an admin unbind can.
"""

import logging

from activations.application.commands.deactivate_license import DeactivateLicenseCommand
from core.domain.exceptions import SelfDeactivationNotAllowedError

logger = logging.getLogger(__name__)


class DeactivateLicenseHandler:
    """Handler for DeactivateLicenseCommand."""

    async def handle(self, command: DeactivateLicenseCommand):
        """
        Reject the request with the fixed policy reason.

        Raises:
            SelfDeactivationNotAllowedError: Always
        """
        logger.info("Refused self-deactivation for machine %s...", command.machine_id[:8])
        raise SelfDeactivationNotAllowedError()
