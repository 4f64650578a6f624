"""
Activation DTOs for API responses.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from activations.domain.services import Binding
from core.domain.exceptions import DomainException


@dataclass
class ActivationResultDTO:
    """DTO for a successful activate or validate response."""

    tier: str
    expires_at: Optional[datetime]
    days_remaining: int
    activated_at: datetime
    machine_id: str
    valid: bool = True
    bound: bool = True
    message: Optional[str] = None

    @classmethod
    def from_binding(cls, binding: Binding, message: Optional[str] = None) -> "ActivationResultDTO":
        """Build the response from a binding."""
        return cls(
            tier=binding.license_key.tier.value,
            expires_at=binding.window.expires_at,
            days_remaining=binding.window.days_remaining,
            activated_at=binding.activation.activated_at,
            machine_id=binding.activation.machine_id.value,
            message=message,
        )


@dataclass
class ActivationFailureDTO:
    """DTO for a rejected activate, validate or deactivate request."""

    reason: str
    code: str
    valid: bool = False
    bound_to: Optional[str] = None
    contact_admin: Optional[bool] = None

    @classmethod
    def from_exception(cls, exc: DomainException) -> "ActivationFailureDTO":
        """Build the response from a validation error."""
        return cls(
            reason=exc.message,
            code=exc.code,
            bound_to=getattr(exc, "bound_to", None),
            contact_admin=getattr(exc, "contact_admin", None),
        )
