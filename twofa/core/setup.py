"""
Two-Factor Setup

Generates everything a user needs to enrol an authenticator app.
Nothing is persisted here: the caller stores the result only after the
user has proven possession of the secret with one valid code.
"""

from dataclasses import dataclass, field

from twofa.config import settings
from twofa.core.recovery_codes import generate_recovery_codes
from twofa.core.totp import format_manual_entry_key, generate_secret, provisioning_uri
from twofa.exceptions import InvalidOwnerLabelError


@dataclass(frozen=True)
class TwoFactorSetup:
    """Result of :func:`generate_setup`."""

    secret: str
    provisioning_uri: str
    recovery_codes: list[str] = field(default_factory=list)

    @property
    def manual_entry_key(self) -> str:
        return format_manual_entry_key(self.secret)


def generate_setup(owner_label: str, issuer: str | None = None) -> TwoFactorSetup:
    """
    Generate a fresh secret, provisioning URI and recovery codes.

    Args:
        owner_label: Account identity shown in the authenticator (usually an email)
        issuer: Issuer name; defaults to the configured one

    Raises:
        InvalidOwnerLabelError: if ``owner_label`` is empty
    """
    if not isinstance(owner_label, str) or not owner_label.strip():
        raise InvalidOwnerLabelError()

    secret = generate_secret()
    uri = provisioning_uri(secret, owner_label.strip(), issuer or settings.totp_issuer)

    return TwoFactorSetup(
        secret=secret,
        provisioning_uri=uri,
        recovery_codes=generate_recovery_codes(),
    )
