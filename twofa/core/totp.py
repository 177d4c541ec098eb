"""
Time-based One-Time Passwords

Secret generation, provisioning URIs and code verification, built on pyotp.
Everything here is pure: nothing is read from or written to storage.
"""

import base64
import binascii
import re

import pyotp
from pyotp.utils import strings_equal

from twofa.constants import (
    BASE32_ALPHABET,
    MANUAL_KEY_GROUP_SIZE,
    SECRET_LENGTH,
    TOTP_DIGITS,
    TOTP_PERIOD_SECONDS,
    TOTP_VALID_WINDOW,
)
from twofa.exceptions import ConfigurationError
from twofa.utils.clock import Clock, SystemClock, to_datetime

# Exactly six ASCII digits; str.isdigit() would also accept other scripts
CODE_PATTERN = re.compile(r"[0-9]{%d}" % TOTP_DIGITS)

# 16 base32 characters carry 80 bits
MIN_SECRET_LENGTH = 16

_system_clock = SystemClock()


def generate_secret() -> str:
    """Generate a new 160-bit secret, base32 encoded without padding."""
    return pyotp.random_base32(length=SECRET_LENGTH)


def is_valid_code_format(candidate) -> bool:
    """Check that a candidate TOTP code is exactly six ASCII digits."""
    return isinstance(candidate, str) and CODE_PATTERN.fullmatch(candidate) is not None


def validate_secret(secret, owner_id: str | None = None) -> str:
    """
    Make sure a stored secret can be used for verification.

    Raises:
        ConfigurationError: if the secret is missing, too short, or not base32
    """
    if not secret or not isinstance(secret, str):
        raise ConfigurationError("Two-factor secret is missing", owner_id=owner_id)

    normalized = secret.upper()
    if any(ch not in BASE32_ALPHABET for ch in normalized):
        raise ConfigurationError("Two-factor secret is not valid base32", owner_id=owner_id)

    if len(normalized) < MIN_SECRET_LENGTH:
        raise ConfigurationError("Two-factor secret is too short", owner_id=owner_id)

    padding = -len(normalized) % 8
    try:
        base64.b32decode(normalized + "=" * padding)
    except binascii.Error as e:
        raise ConfigurationError("Two-factor secret is not valid base32", owner_id=owner_id) from e

    return normalized


def provisioning_uri(secret: str, owner_label: str, issuer: str) -> str:
    """Build the otpauth:// URI that authenticator apps import."""
    return pyotp.TOTP(secret, digits=TOTP_DIGITS, interval=TOTP_PERIOD_SECONDS).provisioning_uri(
        name=owner_label,
        issuer_name=issuer,
    )


def totp_at(secret: str, at_time: float) -> str:
    """Return the code an authenticator would show at ``at_time``."""
    secret = validate_secret(secret)
    totp = pyotp.TOTP(secret, digits=TOTP_DIGITS, interval=TOTP_PERIOD_SECONDS)
    return totp.at(to_datetime(at_time))


def verify_totp(
    candidate_code,
    secret: str,
    at_time: float | None = None,
    clock: Clock | None = None,
    owner_id: str | None = None,
) -> bool:
    """
    Verify a TOTP code against a secret.

    Codes from the previous, current and next 30-second windows are accepted.

    Args:
        candidate_code: Code typed by the user
        secret: Stored base32 secret
        at_time: Unix time to verify at; defaults to the clock
        clock: Time source used when ``at_time`` is not given
        owner_id: Only used to label configuration errors

    Returns:
        True if the code matches

    Raises:
        ConfigurationError: if the secret is missing or corrupt
    """
    if not is_valid_code_format(candidate_code):
        return False

    secret = validate_secret(secret, owner_id=owner_id)

    if at_time is None:
        at_time = (clock or _system_clock).now()

    totp = pyotp.TOTP(secret, digits=TOTP_DIGITS, interval=TOTP_PERIOD_SECONDS)
    counter = totp.timecode(to_datetime(at_time))

    for offset in range(-TOTP_VALID_WINDOW, TOTP_VALID_WINDOW + 1):
        # pyotp rejects negative counters (only reachable in the first window after the epoch)
        if counter + offset < 0:
            continue
        if strings_equal(candidate_code, totp.generate_otp(counter + offset)):
            return True

    return False


def format_manual_entry_key(secret: str, group_size: int = MANUAL_KEY_GROUP_SIZE) -> str:
    """Split a secret into space separated groups for typing by hand."""
    return " ".join(secret[i : i + group_size] for i in range(0, len(secret), group_size))
