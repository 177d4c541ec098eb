"""Request and response models for the two-factor API."""

from typing import Literal

from pydantic import BaseModel, Field

from twofa.core.login import BackupAttempt, TotpAttempt, VerifyRequest


class TwoFactorStatus(BaseModel):
    """2FA status response."""

    enabled: bool
    has_recovery_codes: bool
    remaining_recovery_codes: int
    created_at: str | None = None


class SetupRequest(BaseModel):
    """Request to start 2FA setup."""

    owner_label: str = Field(..., min_length=1, max_length=255)


class TwoFactorSetupResponse(BaseModel):
    """Response for 2FA setup initiation."""

    secret: str
    provisioning_uri: str
    manual_entry_key: str
    qr_code: str  # Base64 encoded PNG
    qr_code_data_uri: str
    already_enabled: bool
    message: str


class ConfirmSetupRequest(BaseModel):
    """
    Complete setup with the generated secret and one TOTP code from it.

    When 2FA is already enabled, ``current_code`` must be a valid code for
    the existing configuration (checked the way ``current_method`` says).
    """

    secret: str = Field(..., min_length=16, max_length=64)
    code: str = Field(..., max_length=16)
    current_method: Literal["totp", "backup"] = "totp"
    current_code: str | None = Field(None, max_length=32)

    def current_request(self) -> VerifyRequest | None:
        if self.current_code is None:
            return None
        if self.current_method == "backup":
            return BackupAttempt(self.current_code)
        return TotpAttempt(self.current_code)


class TwoFactorEnableResponse(BaseModel):
    """Response when 2FA is enabled. Recovery codes are only shown here."""

    enabled: bool
    recovery_codes: list[str]
    remaining_recovery_codes: int
    message: str


class VerifyCodeRequest(BaseModel):
    """
    A TOTP code or a backup code.

    ``method`` selects how ``code`` is checked; the two are never tried
    one after the other.
    """

    method: Literal["totp", "backup"] = "totp"
    code: str = Field(..., max_length=32)

    def to_request(self) -> VerifyRequest:
        if self.method == "backup":
            return BackupAttempt(self.code)
        return TotpAttempt(self.code)


class VerificationResponse(BaseModel):
    valid: bool
    state: str
    reason: str | None = None
    message: str


class ExportRequest(BaseModel):
    """Recovery codes to render as a text file."""

    owner_label: str = Field(..., min_length=1, max_length=255)
    recovery_codes: list[str] = Field(..., min_length=1)
