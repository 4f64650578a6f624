"""
Expiry calculation.

Pure functions over timestamps; callers decide what to do with a
non-positive days_remaining.
"""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from core.domain.clock import utc_now
from core.domain.value_objects import LIFETIME

LIFETIME_DAYS_REMAINING = -1
_SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True)
class ExpiryWindow:
    """Validity window of a bound key."""

    expires_at: Optional[datetime]
    days_remaining: int

    @property
    def is_lifetime(self) -> bool:
        """Check if the window never closes."""
        return self.expires_at is None

    @property
    def has_elapsed(self) -> bool:
        """Check if a finite window has closed."""
        return not self.is_lifetime and self.days_remaining <= 0


class ExpiryCalculator:
    """Computes expiry timestamps and days remaining."""

    @staticmethod
    def compute(
        activated_at: datetime,
        duration_days: int,
        now: Optional[datetime] = None,
    ) -> ExpiryWindow:
        """
        Compute the window opened by an activation.

        Args:
            activated_at: When the key was bound
            duration_days: Key duration, 0 for lifetime
            now: Reference time (defaults to current UTC time)

        Returns:
            ExpiryWindow; lifetime keys yield (None, -1)
        """
        if not duration_days or duration_days <= LIFETIME:
            return ExpiryWindow(expires_at=None, days_remaining=LIFETIME_DAYS_REMAINING)
        expires_at = activated_at + timedelta(days=duration_days)
        return ExpiryCalculator.from_deadline(expires_at, now)

    @staticmethod
    def from_deadline(expires_at: datetime, now: Optional[datetime] = None) -> ExpiryWindow:
        """Compute days remaining until a fixed deadline."""
        now = now or utc_now()
        remaining = (expires_at - now).total_seconds() / _SECONDS_PER_DAY
        return ExpiryWindow(expires_at=expires_at, days_remaining=math.ceil(remaining))

    @staticmethod
    def admin_deadline(license_key, now: Optional[datetime] = None) -> Optional[ExpiryWindow]:
        """Return the window fixed by an admin-set expires_at, if the key has one."""
        if license_key.duration_days and license_key.expires_at is not None:
            return ExpiryCalculator.from_deadline(license_key.expires_at, now)
        return None

    @staticmethod
    def for_key(license_key, activation, now: Optional[datetime] = None) -> ExpiryWindow:
        """
        Compute the effective window for a key and its live activation.

        An admin-set expires_at is authoritative; otherwise the window is
        derived from the activation time.
        """
        fixed = ExpiryCalculator.admin_deadline(license_key, now)
        if fixed is not None:
            return fixed
        return ExpiryCalculator.compute(activation.activated_at, license_key.duration_days, now)
