"""
Domain exceptions.

Domain exceptions represent business rule violations
and domain-specific error conditions. Every exception carries a
human-readable message suitable for end-user display and a
machine-readable code.
"""


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    def __init__(self, message: str, code: str = None):
        """
        Initialize domain exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class LicenseException(DomainException):
    """Base exception for license-related errors."""

    pass


class KeyFormatError(LicenseException):
    """Raised when a key does not match the XXXX-XXXX-XXXX-XXXX shape."""

    def __init__(self, message: str = "Invalid key format. Expected: XXXX-XXXX-XXXX-XXXX"):
        super().__init__(message, code="INVALID_KEY_FORMAT")


class KeySignatureError(LicenseException):
    """Raised when a key's signature does not match its payload."""

    def __init__(self, message: str = "Invalid license key"):
        super().__init__(message, code="INVALID_KEY_SIGNATURE")


class LicenseKeyNotFoundError(LicenseException):
    """Raised when a license key is not found."""

    def __init__(self, message: str = "License key not found"):
        super().__init__(message, code="LICENSE_KEY_NOT_FOUND")


class LicenseRevokedError(LicenseException):
    """Raised when a license key has been revoked."""

    def __init__(self, message: str = "License key has been revoked. Contact an administrator."):
        super().__init__(message, code="LICENSE_REVOKED")


class LicenseExpiredError(LicenseException):
    """Raised when a license key has expired."""

    def __init__(self, message: str = "License key has expired"):
        super().__init__(message, code="LICENSE_EXPIRED")


class InvalidStatusTransitionError(LicenseException):
    """Raised when a status change is not allowed by the transition table."""

    def __init__(self, message: str = "Invalid license status transition"):
        super().__init__(message, code="INVALID_STATUS_TRANSITION")


class DuplicateLicenseKeyError(LicenseException):
    """Raised by repositories when a key string is already stored."""

    def __init__(self, message: str = "License key already exists"):
        super().__init__(message, code="DUPLICATE_LICENSE_KEY")


class ActivationException(DomainException):
    """Base exception for activation-related errors."""

    pass


class AlreadyBoundToOtherMachineError(ActivationException):
    """Raised when a key is already bound to a different machine."""

    def __init__(self, bound_to: str, message: str = None):
        """
        Initialize error.

        Args:
            bound_to: Masked identifier of the machine holding the binding
            message: Optional override for the default message
        """
        super().__init__(
            message
            or (
                f"This license is already bound to another device ({bound_to}). "
                "1 license = 1 device. Contact an administrator to unbind it."
            ),
            code="ALREADY_BOUND_TO_OTHER_MACHINE",
        )
        self.bound_to = bound_to
        self.contact_admin = True


class NotActivatedError(ActivationException):
    """Raised when a key has no live activation for the calling machine."""

    def __init__(self, message: str = "License key is not activated on this machine"):
        super().__init__(message, code="NOT_ACTIVATED")


class SelfDeactivationNotAllowedError(ActivationException):
    """Raised for every end-user deactivation request."""

    def __init__(
        self,
        message: str = (
            "Licenses cannot be deactivated by the user. 1 license = 1 device "
            "(bound to its Machine ID). Contact an administrator to move it to another device."
        ),
    ):
        super().__init__(message, code="DEACTIVATION_NOT_ALLOWED")
        self.contact_admin = True


class LiveActivationExistsError(ActivationException):
    """Raised by repositories when a second live activation would be stored."""

    def __init__(self, message: str = "License key already has a live activation"):
        super().__init__(message, code="LIVE_ACTIVATION_EXISTS")


class InvalidAdminRequestError(DomainException):
    """Raised when an admin request carries unusable parameters."""

    def __init__(self, message: str = "Invalid request"):
        super().__init__(message, code="INVALID_REQUEST")


class StorageError(DomainException):
    """Raised when the persistence layer fails."""

    def __init__(self, message: str = "Server error"):
        super().__init__(message, code="STORAGE_ERROR")


# Errors a caller can act on by changing its input; never retried.
VALIDATION_ERRORS = (
    KeyFormatError,
    KeySignatureError,
    LicenseKeyNotFoundError,
    LicenseRevokedError,
    LicenseExpiredError,
    AlreadyBoundToOtherMachineError,
    NotActivatedError,
    SelfDeactivationNotAllowedError,
)
