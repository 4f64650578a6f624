"""
ManageKeyCommand.

Command for privileged changes to a single key.
"""
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from core.domain.value_objects import LicenseTier


class KeyAction(Enum):
    """Admin override actions."""

    REVOKE = "revoke"
    ACTIVATE = "activate"
    RESET = "reset"
    UNBIND = "unbind"
    DELETE = "delete"
    UPGRADE = "upgrade"
    DOWNGRADE = "downgrade"

    def __str__(self) -> str:
        """Return action as string."""
        return self.value


@dataclass
class ManageKeyCommand:
    """Command to apply an admin action to a key."""

    license_key_id: uuid.UUID
    action: KeyAction
    tier: Optional[LicenseTier] = None
    duration_days: Optional[int] = None
    max_activations: Optional[int] = None
