"""
Login-time Two-Factor Verification

One ``LoginVerification`` handles exactly one submission:

    AwaitingFactor --TotpAttempt/BackupAttempt--> Verified | Rejected

If the owner has no 2FA configured the attempt ends in ``NotApplicable``,
which callers treat as "skip the 2FA step", never as a wrong code.

A backup code is consumed in the same step that accepts it. The store's
atomic removal decides the winner when two requests race for one code;
the loser is rejected like any other invalid backup code.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Union

from twofa.core.recovery_codes import verify_backup_code_hash
from twofa.core.totp import verify_totp
from twofa.exceptions import ConfigurationError
from twofa.stores.base import TwoFactorStore
from twofa.utils.clock import Clock, SystemClock

logger = logging.getLogger(__name__)


class LoginState(str, Enum):
    AWAITING_FACTOR = "awaiting_factor"
    VERIFIED = "verified"
    REJECTED = "rejected"
    NOT_APPLICABLE = "not_applicable"


class RejectReason(str, Enum):
    INVALID_CODE = "invalid_code"
    INVALID_BACKUP_CODE = "invalid_backup_code"
    NOT_ENABLED = "two_factor_not_enabled"
    SECRET_INVALID = "two_factor_secret_invalid"


REASON_MESSAGES = {
    RejectReason.INVALID_CODE: "Invalid verification code",
    RejectReason.INVALID_BACKUP_CODE: "Invalid backup code",
    RejectReason.NOT_ENABLED: "Two-factor authentication is not enabled",
    RejectReason.SECRET_INVALID: "Two-factor secret is missing or corrupt",
}


@dataclass(frozen=True)
class TotpAttempt:
    """A code from the authenticator app."""

    code: str


@dataclass(frozen=True)
class BackupAttempt:
    """A single-use recovery code."""

    code: str


VerifyRequest = Union[TotpAttempt, BackupAttempt]


@dataclass(frozen=True)
class VerificationResult:
    state: LoginState
    reason: RejectReason | None = None

    @property
    def valid(self) -> bool:
        return self.state is LoginState.VERIFIED

    @property
    def message(self) -> str:
        if self.valid:
            return "Code verified successfully"
        return REASON_MESSAGES.get(self.reason, "Verification failed")


class LoginVerification:
    """State machine for a single 2FA submission."""

    def __init__(self, owner_id: str, store: TwoFactorStore, clock: Clock | None = None):
        self.owner_id = str(owner_id)
        self.store = store
        self.clock = clock or SystemClock()
        self.state = LoginState.AWAITING_FACTOR
        self.result: VerificationResult | None = None

    async def submit(self, request: VerifyRequest) -> VerificationResult:
        """
        Verify one factor and move to a terminal state.

        Raises:
            ConfigurationError: if the stored secret is corrupt; the attempt still ends rejected
            ValueError: if this attempt was already submitted or the request type is unknown
        """
        if self.state is not LoginState.AWAITING_FACTOR:
            raise ValueError("This verification attempt has already completed.")

        if not isinstance(request, (TotpAttempt, BackupAttempt)):
            raise ValueError(f"Unsupported verification request: {type(request).__name__}")

        record = await self.store.load(self.owner_id)
        if record is None:
            return self._finish(LoginState.NOT_APPLICABLE, RejectReason.NOT_ENABLED)

        if isinstance(request, TotpAttempt):
            try:
                valid = verify_totp(request.code, record.secret, clock=self.clock, owner_id=self.owner_id)
            except ConfigurationError:
                logger.error(f"Stored 2FA secret for owner {self.owner_id} is corrupt")
                self._finish(LoginState.REJECTED, RejectReason.SECRET_INVALID)
                raise

            if not valid:
                logger.info(f"TOTP rejected for owner {self.owner_id}")
                return self._finish(LoginState.REJECTED, RejectReason.INVALID_CODE)

            logger.info(f"TOTP verified for owner {self.owner_id}")
            return self._finish(LoginState.VERIFIED)

        if not verify_backup_code_hash(request.code, record.recovery_codes):
            logger.info(f"Backup code rejected for owner {self.owner_id}")
            return self._finish(LoginState.REJECTED, RejectReason.INVALID_BACKUP_CODE)

        if not await self.store.remove_recovery_code(self.owner_id, request.code):
            logger.warning(f"Backup code for owner {self.owner_id} was consumed by a concurrent request")
            return self._finish(LoginState.REJECTED, RejectReason.INVALID_BACKUP_CODE)

        logger.info(f"Backup code used for owner {self.owner_id}")
        return self._finish(LoginState.VERIFIED)

    def _finish(self, state: LoginState, reason: RejectReason | None = None) -> VerificationResult:
        self.state = state
        self.result = VerificationResult(state=state, reason=reason)
        return self.result
