"""
App configuration for Machine License Service.
"""

import logging
import os
import sys

from django.apps import AppConfig

logger = logging.getLogger(__name__)

SKIP_COMMANDS = (
    "migrate",
    "makemigrations",
    "collectstatic",
    "shell",
    "check",
    "createsuperuser",
)


class MachineLicenseServiceConfig(AppConfig):
    """App configuration for MachineLicenseService."""

    name = "MachineLicenseService"
    verbose_name = "Machine License Service"

    def ready(self):
        """Called when Django starts."""
        if len(sys.argv) > 1 and sys.argv[1] in SKIP_COMMANDS:
            return

        # Django's autoreloader imports the project twice
        if os.environ.get("RUN_MAIN") == "false":
            return

        if not hasattr(self, "_initialized"):
            logger.info("Setting up observability...")
            self.setup_observability()
            self._initialized = True
            logger.info("Observability setup complete")

    def setup_observability(self):
        """Setup observability after apps are ready."""
        from core.instrumentation import setup_opentelemetry

        try:
            setup_opentelemetry()
        except Exception as e:
            logger.warning(f"Failed to setup OpenTelemetry: {e}")
