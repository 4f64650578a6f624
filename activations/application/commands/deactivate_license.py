"""
DeactivateLicenseCommand.
"""

from dataclasses import dataclass


@dataclass
class DeactivateLicenseCommand:
    """Command from an end user asking to release a binding."""

    license_key: str
    machine_id: str
