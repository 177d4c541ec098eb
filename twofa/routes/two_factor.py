"""
Two-Factor Authentication Routes

API endpoints for 2FA setup, login verification and management.

Primary credentials are checked before these endpoints are reached; the
owner is identified by the path.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from twofa.core.login import LoginState
from twofa.exceptions import InvalidVerificationCodeError
from twofa.schemas.two_factor import (
    ConfirmSetupRequest,
    ExportRequest,
    SetupRequest,
    TwoFactorEnableResponse,
    TwoFactorSetupResponse,
    TwoFactorStatus,
    VerificationResponse,
    VerifyCodeRequest,
)
from twofa.services.two_factor_service import TwoFactorService, get_two_factor_service

router = APIRouter(tags=["Two-Factor Authentication"])


# ============== Status & Setup ==============


@router.get("/{owner_id}/status", response_model=TwoFactorStatus)
async def get_2fa_status(
    owner_id: str,
    service: TwoFactorService = Depends(get_two_factor_service),
) -> TwoFactorStatus:
    """Get current 2FA status for an owner."""
    status_data = await service.get_status(owner_id)
    return TwoFactorStatus(**status_data)


@router.post("/{owner_id}/setup", response_model=TwoFactorSetupResponse)
async def setup_2fa(
    owner_id: str,
    data: SetupRequest,
    service: TwoFactorService = Depends(get_two_factor_service),
) -> TwoFactorSetupResponse:
    """
    Generate a secret and QR code.

    Nothing is saved until /setup/confirm succeeds.
    """
    result = await service.begin_setup(owner_id, data.owner_label)
    return TwoFactorSetupResponse(**result)


@router.post("/{owner_id}/setup/confirm", response_model=TwoFactorEnableResponse)
async def confirm_2fa_setup(
    owner_id: str,
    data: ConfirmSetupRequest,
    service: TwoFactorService = Depends(get_two_factor_service),
) -> TwoFactorEnableResponse:
    """
    Complete 2FA setup by verifying a TOTP code against the new secret.

    Returns the recovery codes, which are not shown again. Replacing an
    existing configuration also needs a valid current code.
    """
    result = await service.confirm_setup(owner_id, data.secret, data.code, data.current_request())
    return TwoFactorEnableResponse(**result)


# ============== Verification ==============


@router.post("/{owner_id}/verify", response_model=VerificationResponse)
async def verify_2fa_code(
    owner_id: str,
    data: VerifyCodeRequest,
    service: TwoFactorService = Depends(get_two_factor_service),
) -> VerificationResponse:
    """
    Verify a TOTP or backup code during login.

    A backup code is consumed when accepted. Owners without 2FA get
    ``state = not_applicable``.
    """
    result = await service.verify_login(owner_id, data.to_request())

    if result.state is LoginState.REJECTED:
        raise InvalidVerificationCodeError(result.message, reason=result.reason.value)

    return VerificationResponse(
        valid=result.valid,
        state=result.state.value,
        reason=result.reason.value if result.reason else None,
        message=result.message,
    )


# ============== Management ==============


@router.post("/{owner_id}/disable")
async def disable_2fa(
    owner_id: str,
    data: VerifyCodeRequest,
    service: TwoFactorService = Depends(get_two_factor_service),
) -> dict:
    """
    Disable 2FA for an owner.

    Requires a valid TOTP or backup code.
    """
    await service.disable(owner_id, data.to_request())
    return {"disabled": True, "message": "2FA has been disabled"}


@router.post("/recovery-codes/export", response_class=PlainTextResponse)
async def export_recovery_codes(
    data: ExportRequest,
    service: TwoFactorService = Depends(get_two_factor_service),
) -> PlainTextResponse:
    """Return recovery codes as a downloadable text file."""
    filename, text = service.export_recovery_codes(data.owner_label, data.recovery_codes)
    return PlainTextResponse(
        text,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
