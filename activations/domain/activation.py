"""
Activation domain entity.

This is the core domain entity representing a key bound to a machine.
It contains business logic and is independent of infrastructure.
"""

import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from core.domain.clock import utc_now
from core.domain.value_objects import MachineId

UNKNOWN = "Unknown"


@dataclass(frozen=True)
class Activation:
    """
    Activation domain entity.

    Binds a license key to exactly one machine. A null deactivated_at
    means the binding is live.
    This is an immutable value object with business logic.
    """

    id: uuid.UUID
    license_key_id: uuid.UUID
    machine_id: MachineId
    machine_name: str
    app_version: str
    ip_address: Optional[str]
    activated_at: datetime
    last_seen_at: datetime
    deactivated_at: Optional[datetime]

    def __post_init__(self):
        """Validate activation entity."""
        if not self.license_key_id:
            raise ValueError("License key ID is required")
        if not self.machine_id:
            raise ValueError("Machine ID is required")

    @classmethod
    def create(
        cls,
        license_key_id: uuid.UUID,
        machine_id: str,
        machine_name: Optional[str] = None,
        app_version: Optional[str] = None,
        ip_address: Optional[str] = None,
        activation_id: Optional[uuid.UUID] = None,
        now: Optional[datetime] = None,
    ) -> "Activation":
        """
        Create a new live Activation entity.

        Args:
            license_key_id: Owning license key UUID
            machine_id: Machine identifier
            machine_name: Optional display name of the machine
            app_version: Optional client version
            ip_address: Optional caller IP
            activation_id: Optional UUID (generated if not provided)
            now: Activation time (defaults to current UTC time)

        Returns:
            Activation entity instance
        """
        now = now or utc_now()
        return cls(
            id=activation_id or uuid.uuid4(),
            license_key_id=license_key_id,
            machine_id=MachineId(machine_id),
            machine_name=machine_name or UNKNOWN,
            app_version=app_version or UNKNOWN,
            ip_address=ip_address,
            activated_at=now,
            last_seen_at=now,
            deactivated_at=None,
        )

    @property
    def is_live(self) -> bool:
        """Check if this activation is the current binding."""
        return self.deactivated_at is None

    def is_for(self, machine_id: str) -> bool:
        """Check if this activation binds the given machine."""
        return self.machine_id.value == machine_id

    @property
    def display_name(self) -> str:
        """Name shown to admins: machine name, else the machine id."""
        if self.machine_name and self.machine_name != UNKNOWN:
            return self.machine_name
        return self.machine_id.value

    def heartbeat(
        self,
        ip_address: Optional[str] = None,
        app_version: Optional[str] = None,
        machine_name: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> "Activation":
        """
        Create a new Activation instance with refreshed last_seen_at.

        Omitted diagnostics keep their stored values.
        """
        return replace(
            self,
            last_seen_at=now or utc_now(),
            ip_address=ip_address or self.ip_address,
            app_version=app_version or self.app_version,
            machine_name=machine_name or self.machine_name,
        )

    def deactivate(self, now: Optional[datetime] = None) -> "Activation":
        """
        Create a new Activation instance with the binding released.

        Returns:
            New Activation instance, or self if already deactivated
        """
        if not self.is_live:
            return self
        return replace(self, deactivated_at=now or utc_now())
