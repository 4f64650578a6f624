"""
ActivateLicenseCommand.

Command to bind a license key to a machine.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class ActivateLicenseCommand:
    """Command to activate a license key on a machine."""

    license_key: str
    machine_id: str
    machine_name: Optional[str] = None
    app_version: Optional[str] = None
    ip_address: Optional[str] = None
