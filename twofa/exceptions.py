"""
Custom Exception Classes for the Two-Factor Service

This module defines the exceptions raised by the two-factor core and
service layer, and the machine-readable error codes attached to them.

Only configuration problems (a missing or corrupt stored secret) escape
the verification core as exceptions. Wrong codes, malformed codes and
lost consumption races are ordinary negative results.
"""

from enum import Enum
from typing import Any

from fastapi import status


class ErrorCode(str, Enum):
    """Machine-readable error codes returned in error responses."""

    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    VALIDATION_INVALID_CODE_FORMAT = "VALIDATION_INVALID_CODE_FORMAT"
    VALIDATION_INVALID_OWNER_LABEL = "VALIDATION_INVALID_OWNER_LABEL"
    AUTH_FAILED = "AUTH_FAILED"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    TWO_FACTOR_NOT_ENABLED = "TWO_FACTOR_NOT_ENABLED"
    TWO_FACTOR_ALREADY_ENABLED = "TWO_FACTOR_ALREADY_ENABLED"
    TWO_FACTOR_INVALID_CODE = "TWO_FACTOR_INVALID_CODE"
    TWO_FACTOR_SECRET_INVALID = "TWO_FACTOR_SECRET_INVALID"


class TwoFactorError(Exception):
    """Base exception class for all two-factor exceptions"""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


# ============================================================================
# Input Exceptions
# ============================================================================


class InputFormatError(TwoFactorError):
    """Raised when a submitted code does not have the expected shape"""

    def __init__(self, message: str = "Invalid code format", field: str | None = None):
        details = {"field": field} if field else {}
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code=ErrorCode.VALIDATION_INVALID_CODE_FORMAT,
            details=details,
        )


class InvalidOwnerLabelError(TwoFactorError):
    """Raised when setup is requested without an owner label"""

    def __init__(self, message: str = "Owner label must not be empty"):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code=ErrorCode.VALIDATION_INVALID_OWNER_LABEL,
        )


# ============================================================================
# Configuration & State Exceptions
# ============================================================================


class ConfigurationError(TwoFactorError):
    """
    Raised when the stored secret is missing or not valid base32.

    The user cannot fix this by retyping a code; the account has to go
    through setup again.
    """

    def __init__(self, message: str = "Two-factor secret is missing or corrupt", owner_id: str | None = None):
        details = {"owner_id": owner_id} if owner_id is not None else {}
        super().__init__(
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            error_code=ErrorCode.TWO_FACTOR_SECRET_INVALID,
            details=details,
        )


class NotFoundError(TwoFactorError):
    """Base class for missing resources"""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.RESOURCE_NOT_FOUND,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            error_code=error_code,
            details=details,
        )


class TwoFactorNotEnabledError(NotFoundError):
    """Raised when an operation needs 2FA but the owner has none configured"""

    def __init__(self, owner_id: str | None = None):
        super().__init__(
            message="Two-factor authentication is not enabled",
            error_code=ErrorCode.TWO_FACTOR_NOT_ENABLED,
            details={"owner_id": owner_id} if owner_id is not None else {},
        )


class TwoFactorAlreadyEnabledError(TwoFactorError):
    """Raised when re-enrolment is attempted without proof of the current factor"""

    def __init__(self, owner_id: str | None = None):
        super().__init__(
            message="2FA is already enabled. Confirm with your current code or a backup code to reconfigure.",
            status_code=status.HTTP_409_CONFLICT,
            error_code=ErrorCode.TWO_FACTOR_ALREADY_ENABLED,
            details={"owner_id": owner_id} if owner_id is not None else {},
        )


# ============================================================================
# Verification Exceptions
# ============================================================================


class InvalidVerificationCodeError(TwoFactorError):
    """Raised when an operation requiring proof of possession gets a wrong code"""

    def __init__(self, message: str = "Invalid verification code", reason: str | None = None):
        details = {"reason": reason} if reason else {}
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code=ErrorCode.TWO_FACTOR_INVALID_CODE,
            details=details,
        )
