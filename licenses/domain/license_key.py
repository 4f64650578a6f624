"""
LicenseKey domain entity.

This is the core domain entity representing a signed license key.
It contains business logic and is independent of infrastructure.
"""

import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Optional

from core.domain.clock import utc_now
from core.domain.value_objects import LIFETIME, LicenseStatus, LicenseTier
from licenses.domain.key_codec import floor_duration, is_valid_format


@dataclass(frozen=True)
class LicenseKey:
    """
    LicenseKey domain entity.

    Represents a key issued to a customer. Status changes go through
    the LicenseStatus transition table.
    This is an immutable value object with business logic.
    """

    id: uuid.UUID
    key: str
    tier: LicenseTier
    status: LicenseStatus
    duration_days: int
    expires_at: Optional[datetime]
    max_activations: int
    notes: str
    created_at: datetime
    updated_at: datetime

    def __post_init__(self):
        """Validate license key entity."""
        if not is_valid_format(self.key):
            raise ValueError(f"Invalid license key format: {self.key}")
        if self.duration_days < 0:
            raise ValueError("Duration cannot be negative")
        if self.max_activations < 1:
            raise ValueError("Max activations must be at least 1")

    @classmethod
    def create(
        cls,
        key: str,
        tier: LicenseTier,
        duration_days: int = LIFETIME,
        max_activations: int = 1,
        notes: str = "",
        license_key_id: Optional[uuid.UUID] = None,
        now: Optional[datetime] = None,
    ) -> "LicenseKey":
        """
        Create a new LicenseKey entity with status active.

        Args:
            key: Signed key string
            tier: Tier encoded in the key
            duration_days: Duration bucket, 0 for lifetime
            max_activations: Stored capacity (informational)
            notes: Free text
            license_key_id: Optional UUID (generated if not provided)
            now: Creation time (defaults to current UTC time)

        Returns:
            LicenseKey entity instance
        """
        now = now or utc_now()
        return cls(
            id=license_key_id or uuid.uuid4(),
            key=key,
            tier=tier,
            status=LicenseStatus.ACTIVE,
            duration_days=duration_days,
            expires_at=None,
            max_activations=max_activations,
            notes=notes or "",
            created_at=now,
            updated_at=now,
        )

    @property
    def is_lifetime(self) -> bool:
        """Check if the key never expires."""
        return self.duration_days == LIFETIME

    def with_status(self, status: LicenseStatus) -> "LicenseKey":
        """
        Create a new LicenseKey instance with a new status.

        Raises:
            InvalidStatusTransitionError: If the transition is not allowed
        """
        new_status = self.status.transition_to(status)
        if new_status == self.status:
            return self
        return replace(self, status=new_status, updated_at=utc_now())

    def mark_used(self) -> "LicenseKey":
        """Record that the key is bound to a machine."""
        return self.with_status(LicenseStatus.USED)

    def mark_expired(self) -> "LicenseKey":
        """Record that the key's window has elapsed."""
        return self.with_status(LicenseStatus.EXPIRED)

    def revoke(self) -> "LicenseKey":
        """Revoke the key."""
        return self.with_status(LicenseStatus.REVOKED)

    def reactivate(self) -> "LicenseKey":
        """Return the key to active, e.g. to undo a revoke or free a binding."""
        return self.with_status(LicenseStatus.ACTIVE)

    def release(self) -> "LicenseKey":
        """
        Return the key to active after its bindings were released.

        Any admin-set expires_at is cleared so the next binding's window
        starts from its own activation time.
        """
        released = self.reactivate()
        if released.expires_at is None:
            return released
        return replace(released, expires_at=None, updated_at=utc_now())

    def change_plan(
        self,
        tier: LicenseTier,
        duration_days: Optional[int] = None,
        max_activations: Optional[int] = None,
        window_start: Optional[datetime] = None,
    ) -> "LicenseKey":
        """
        Create a new LicenseKey instance with a changed tier and duration.

        A new positive duration sets expires_at from window_start; a
        duration of 0 clears it.

        Args:
            tier: New tier
            duration_days: Optional new duration, floored to a bucket
            max_activations: Optional new stored capacity
            window_start: Start of the new window (earliest live activation
                or now)

        Returns:
            New LicenseKey instance
        """
        changes = {"tier": tier, "updated_at": utc_now()}
        if max_activations is not None:
            if max_activations < 1:
                raise ValueError("Max activations must be at least 1")
            changes["max_activations"] = max_activations
        if duration_days is not None:
            bucket = floor_duration(duration_days)
            changes["duration_days"] = bucket
            if bucket == LIFETIME:
                changes["expires_at"] = None
            else:
                start = window_start or changes["updated_at"]
                changes["expires_at"] = start + timedelta(days=bucket)
        return replace(self, **changes)
