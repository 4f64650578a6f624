"""
ValidateLicenseCommand.

Heartbeat command; never creates a binding.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class ValidateLicenseCommand:
    """Command to validate a key on the machine it is bound to."""

    license_key: str
    machine_id: str
    ip_address: Optional[str] = None
