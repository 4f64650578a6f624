"""
Value objects for the domain.

Value objects are immutable objects that are defined by their attributes
rather than their identity. They have no identity and are compared by value.
"""
from abc import ABC
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet

from core.domain.exceptions import InvalidStatusTransitionError


@dataclass(frozen=True)
class ValueObject(ABC):
    """
    Base class for value objects.

    Value objects are immutable and compared by value.
    """

    def __eq__(self, other):
        """Compare value objects by their attributes."""
        if not isinstance(other, self.__class__):
            return False
        return self.__dict__ == other.__dict__

    def __hash__(self):
        """Make value objects hashable."""
        return hash(tuple(sorted(self.__dict__.items())))


class LicenseTier(Enum):
    """Entitlement level encoded in a key."""

    PRO = "pro"
    ENTERPRISE = "enterprise"

    def __str__(self) -> str:
        """Return tier as string."""
        return self.value


class LicenseStatus(Enum):
    """License key status value object."""

    ACTIVE = "active"
    USED = "used"
    REVOKED = "revoked"
    EXPIRED = "expired"

    def __str__(self) -> str:
        """Return status as string."""
        return self.value

    def can_transition_to(self, target: "LicenseStatus") -> bool:
        """
        Check whether the transition table allows moving to target.

        Staying in the same status is always allowed.
        """
        if target == self:
            return True
        return target in _TRANSITIONS[self]

    def transition_to(self, target: "LicenseStatus") -> "LicenseStatus":
        """
        Return target if the transition is allowed.

        Raises:
            InvalidStatusTransitionError: If the table has no such edge
        """
        if not self.can_transition_to(target):
            raise InvalidStatusTransitionError(
                f"Cannot change license status from {self.value} to {target.value}"
            )
        return target


# active -> used on first binding, active/used -> revoked by admin,
# any -> active by admin, any -> expired once the window elapses.
_TRANSITIONS: Dict[LicenseStatus, FrozenSet[LicenseStatus]] = {
    LicenseStatus.ACTIVE: frozenset(
        {LicenseStatus.USED, LicenseStatus.REVOKED, LicenseStatus.EXPIRED}
    ),
    LicenseStatus.USED: frozenset(
        {LicenseStatus.ACTIVE, LicenseStatus.REVOKED, LicenseStatus.EXPIRED}
    ),
    LicenseStatus.REVOKED: frozenset({LicenseStatus.ACTIVE, LicenseStatus.EXPIRED}),
    LicenseStatus.EXPIRED: frozenset({LicenseStatus.ACTIVE}),
}


# Supported validity lengths in days; 0 means lifetime.
DURATION_BUCKETS = (3, 7, 14, 30, 90, 180, 365)
LIFETIME = 0


@dataclass(frozen=True)
class MachineId(ValueObject):
    """Opaque caller-supplied identifier for an installation."""

    value: str

    def __post_init__(self):
        """Validate machine identifier."""
        if not self.value or len(self.value.strip()) == 0:
            raise ValueError("Machine ID cannot be empty")
        if len(self.value) > 255:
            raise ValueError("Machine ID too long")

    def masked(self) -> str:
        """Return the identifier shortened for display to other callers."""
        return f"{self.value[:8]}..."

    def __str__(self) -> str:
        """Return identifier as string."""
        return self.value
