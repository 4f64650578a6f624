"""
License key codec.

Keys have the shape AAAA-BBBB-TDMR-SSSS:

- AAAA, BBBB: random groups
- T: tier, D: duration bucket, M: creation month, R: random filler
- SSSS: first four hex characters of HMAC-SHA256 over "AAAA-BBBB-TDMR"

Changing any character of the first three groups invalidates the signature,
so keys can be distributed without pre-registration.
"""

import hashlib
import hmac
import re
import secrets
import string
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from core.domain.clock import utc_now
from core.domain.exceptions import KeyFormatError
from core.domain.value_objects import DURATION_BUCKETS, LIFETIME, LicenseTier

KEY_PATTERN = re.compile(r"^[A-Z0-9]{4}-[A-Z0-9]{4}-[A-Z0-9]{4}-[A-Z0-9]{4}$")
KEY_ALPHABET = string.ascii_uppercase + string.digits
SIGNATURE_LENGTH = 4

TIER_CHARS = {LicenseTier.PRO: "P", LicenseTier.ENTERPRISE: "E"}
TIERS_BY_CHAR = {char: tier for tier, char in TIER_CHARS.items()}

DURATION_CHARS = {
    LIFETIME: "L",
    3: "D",
    7: "W",
    14: "F",
    30: "1",
    90: "3",
    180: "6",
    365: "Y",
}
DURATIONS_BY_CHAR = {char: days for days, char in DURATION_CHARS.items()}


def normalize_key(key: str) -> str:
    """Strip whitespace and uppercase a raw key."""
    return (key or "").strip().upper()


def is_valid_format(key: str) -> bool:
    """Check that key matches the four-group shape."""
    return bool(KEY_PATTERN.match(key or ""))


def floor_duration(duration_days: int) -> int:
    """
    Map a requested duration onto a bucket.

    Returns the largest bucket not above the request. Requests below the
    smallest bucket still map to the smallest bucket; 0 or less is lifetime.
    """
    if duration_days is None or duration_days <= 0:
        return LIFETIME
    chosen = DURATION_BUCKETS[0]
    for bucket in DURATION_BUCKETS:
        if duration_days >= bucket:
            chosen = bucket
    return chosen


@dataclass(frozen=True)
class KeyVerification:
    """Outcome of verifying a key's signature and metadata."""

    valid: bool
    tier: Optional[LicenseTier] = None
    duration_days: Optional[int] = None
    reason: Optional[str] = None


class KeyCodec:
    """Encodes tier and duration into signed keys and verifies them."""

    def __init__(self, secret: str):
        """
        Initialize codec.

        Args:
            secret: HMAC secret shared by every key issuer and verifier
        """
        if not secret:
            raise ValueError("License signing secret is required")
        self._secret = secret.encode()

    def sign(self, payload: str) -> str:
        """Return the truncated uppercase-hex signature for a payload."""
        digest = hmac.new(self._secret, payload.encode(), hashlib.sha256).hexdigest()
        return digest[:SIGNATURE_LENGTH].upper()

    def generate(
        self,
        tier: LicenseTier,
        duration_days: int = LIFETIME,
        issued_at: Optional[datetime] = None,
    ) -> str:
        """
        Generate a signed license key.

        Args:
            tier: Tier to encode
            duration_days: Requested duration, floored to a bucket
            issued_at: Creation time used for the month marker

        Returns:
            Key string in XXXX-XXXX-XXXX-XXXX format
        """
        issued_at = issued_at or utc_now()
        first = self._random_group()
        second = self._random_group()
        metadata = (
            TIER_CHARS[tier]
            + DURATION_CHARS[floor_duration(duration_days)]
            + chr(ord("A") + issued_at.month - 1)
            + secrets.choice(KEY_ALPHABET)
        )
        payload = f"{first}-{second}-{metadata}"
        return f"{payload}-{self.sign(payload)}"

    def verify(self, key: str) -> KeyVerification:
        """
        Verify a key's signature and decode its metadata.

        Args:
            key: Normalized key string

        Returns:
            KeyVerification with tier and duration when valid

        Raises:
            KeyFormatError: If key does not match the four-group shape
        """
        if not is_valid_format(key):
            raise KeyFormatError()

        payload, signature = key.rsplit("-", 1)
        if not hmac.compare_digest(signature, self.sign(payload)):
            return KeyVerification(valid=False, reason="invalid signature")

        metadata = payload.split("-")[2]
        tier = TIERS_BY_CHAR.get(metadata[0])
        if tier is None:
            return KeyVerification(valid=False, reason="invalid tier")

        duration_days = DURATIONS_BY_CHAR.get(metadata[1])
        if duration_days is None:
            return KeyVerification(valid=False, reason="invalid duration")

        return KeyVerification(valid=True, tier=tier, duration_days=duration_days)

    @staticmethod
    def _random_group() -> str:
        return "".join(secrets.choice(KEY_ALPHABET) for _ in range(4))
