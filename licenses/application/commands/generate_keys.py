"""
GenerateKeysCommand.

Command to issue a batch of signed keys.
"""
from dataclasses import dataclass

from core.domain.value_objects import LIFETIME, LicenseTier


@dataclass
class GenerateKeysCommand:
    """Command to generate license keys."""

    tier: LicenseTier = LicenseTier.PRO
    count: int = 1
    duration_days: int = LIFETIME
    max_activations: int = 1
    notes: str = ""
