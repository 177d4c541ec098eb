"""
Two-Factor Authentication Service

Ties the pure TOTP and recovery-code logic to a store and a clock.
Covers enrolment (setup, confirmation), login verification, backup-code
consumption and disabling 2FA.
"""

import logging

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from twofa.config import settings
from twofa.core.login import LoginState, LoginVerification, VerificationResult, VerifyRequest
from twofa.core.records import TwoFactorSecret
from twofa.core.recovery_codes import generate_recovery_codes
from twofa.core.setup import generate_setup
from twofa.core.totp import validate_secret, verify_totp
from twofa.database import get_db
from twofa.exceptions import (
    ConfigurationError,
    InputFormatError,
    InvalidVerificationCodeError,
    TwoFactorAlreadyEnabledError,
    TwoFactorNotEnabledError,
)
from twofa.stores.base import TwoFactorStore
from twofa.stores.sql import SQLAlchemyTwoFactorStore
from twofa.utils.clock import Clock, SystemClock, to_datetime
from twofa.utils.export import export_filename, render_recovery_codes
from twofa.utils.qr import generate_qr_code, to_data_uri

logger = logging.getLogger(__name__)


class TwoFactorService:
    """Service for managing two-factor authentication."""

    def __init__(self, store: TwoFactorStore, clock: Clock | None = None, issuer: str | None = None):
        self.store = store
        self.clock = clock or SystemClock()
        self.issuer = issuer or settings.totp_issuer

    async def get_status(self, owner_id: str) -> dict:
        """
        Get 2FA status for an owner.

        Returns:
            dict with enabled flag and recovery-code count
        """
        record = await self.store.load(owner_id)

        if not record:
            return {
                "enabled": False,
                "has_recovery_codes": False,
                "remaining_recovery_codes": 0,
                "created_at": None,
            }

        return {
            "enabled": True,
            "has_recovery_codes": record.remaining_recovery_codes > 0,
            "remaining_recovery_codes": record.remaining_recovery_codes,
            "created_at": record.created_at.isoformat() if record.created_at else None,
        }

    async def is_enabled(self, owner_id: str) -> bool:
        """Check if 2FA is enabled for an owner."""
        return await self.store.load(owner_id) is not None

    async def begin_setup(self, owner_id: str, owner_label: str) -> dict:
        """
        Generate a secret and QR code for enrolment.

        Nothing is stored. The client sends the secret back to
        :meth:`confirm_setup` together with a code from the authenticator
        app; recovery codes are issued there.

        Returns:
            dict with secret, provisioning URI and QR code
        """
        setup = generate_setup(owner_label, issuer=self.issuer)
        already_enabled = await self.is_enabled(owner_id)

        logger.info(f"2FA setup generated for owner {owner_id}")

        message = "Scan the QR code with your authenticator app, then confirm with a code to enable 2FA"
        if already_enabled:
            message += (
                ". 2FA is already enabled: confirming also needs a code from your current "
                "authenticator or a backup code, and replaces both"
            )

        qr_code = generate_qr_code(setup.provisioning_uri)

        return {
            "secret": setup.secret,
            "provisioning_uri": setup.provisioning_uri,
            "manual_entry_key": setup.manual_entry_key,
            "qr_code": qr_code,
            "qr_code_data_uri": to_data_uri(qr_code),
            "already_enabled": already_enabled,
            "message": message,
        }

    async def confirm_setup(
        self,
        owner_id: str,
        secret: str,
        code: str,
        current: VerifyRequest | None = None,
    ) -> dict:
        """
        Verify possession of a new secret and enable 2FA.

        Recovery codes are generated here and returned once; only their
        digests are stored. If 2FA is already enabled, ``current`` must be a
        valid code for the existing configuration, which is then replaced
        together with all previously issued recovery codes.

        Returns:
            dict with the new recovery codes (only shown once)

        Raises:
            InputFormatError: if the secret is malformed
            TwoFactorAlreadyEnabledError: if 2FA is enabled and no current code is given
            InvalidVerificationCodeError: if either code is wrong
        """
        try:
            secret = validate_secret(secret, owner_id=owner_id)
        except ConfigurationError as e:
            raise InputFormatError("Setup secret is not valid base32", field="secret") from e

        existing = await self.store.load(owner_id)
        if existing is not None and current is None:
            logger.warning(f"2FA re-setup for owner {owner_id} attempted without the current factor")
            raise TwoFactorAlreadyEnabledError(owner_id)

        if not verify_totp(code, secret, clock=self.clock, owner_id=owner_id):
            logger.info(f"2FA setup confirmation rejected for owner {owner_id}")
            raise InvalidVerificationCodeError("Invalid verification code. Please try again.")

        if existing is not None:
            result = await self.verify_login(owner_id, current)
            if result.state is LoginState.REJECTED:
                logger.info(f"2FA re-setup for owner {owner_id} rejected: current factor invalid")
                raise InvalidVerificationCodeError(result.message, reason=result.reason.value)

        recovery_codes = generate_recovery_codes()
        record = TwoFactorSecret.create(
            owner_id=owner_id,
            secret=secret,
            recovery_codes=recovery_codes,
            created_at=to_datetime(self.clock.now()),
        )
        await self.store.save(record)

        logger.info(f"2FA enabled for owner {owner_id}")

        return {
            "enabled": True,
            "recovery_codes": recovery_codes,
            "remaining_recovery_codes": record.remaining_recovery_codes,
            "message": "2FA is now enabled. Save these backup codes securely - they won't be shown again!",
        }

    async def verify_login(self, owner_id: str, request: VerifyRequest) -> VerificationResult:
        """
        Verify a TOTP or backup code during login.

        A backup code that verifies is consumed in the same step.

        Raises:
            ConfigurationError: if the stored secret is corrupt
        """
        attempt = LoginVerification(owner_id, self.store, clock=self.clock)
        return await attempt.submit(request)

    async def consume_backup_code(self, owner_id: str, code: str) -> bool:
        """Remove a backup code. Returns False if it was already gone."""
        removed = await self.store.remove_recovery_code(owner_id, code)
        if removed:
            logger.info(f"Backup code consumed for owner {owner_id}")
        return removed

    async def disable(self, owner_id: str, request: VerifyRequest) -> bool:
        """
        Disable 2FA for an owner.

        Requires a valid TOTP or backup code.

        Raises:
            TwoFactorNotEnabledError: if 2FA is not enabled
            InvalidVerificationCodeError: if the code is wrong
        """
        result = await self.verify_login(owner_id, request)

        if result.state is LoginState.NOT_APPLICABLE:
            raise TwoFactorNotEnabledError(owner_id)
        if not result.valid:
            raise InvalidVerificationCodeError(result.message, reason=result.reason.value)

        await self.store.delete(owner_id)

        logger.info(f"2FA disabled for owner {owner_id}")
        return True

    def export_recovery_codes(self, owner_label: str, codes: list[str]) -> tuple[str, str]:
        """
        Render recovery codes as a downloadable text file.

        Returns:
            (filename, text)
        """
        now = to_datetime(self.clock.now())
        text = render_recovery_codes(owner_label, codes, generated_at=now, issuer=self.issuer)
        return export_filename(now, issuer=self.issuer), text


# Dependency for FastAPI
async def get_two_factor_service(db: AsyncSession = Depends(get_db)) -> TwoFactorService:
    """FastAPI dependency for TwoFactorService."""
    return TwoFactorService(SQLAlchemyTwoFactorStore(db))
