"""
Recovery Codes

Single-use backup codes that stand in for the authenticator app.

Codes are shown to the user once, in plain text, and stored as SHA-256
digests of their normalised form. Matching ignores case and any
formatting characters the user may type ("AB12-CD34" == "ab12cd34").
"""

import hashlib
import re
import secrets
from collections.abc import Iterable

from twofa.constants import RECOVERY_CODE_ALPHABET, RECOVERY_CODE_COUNT, RECOVERY_CODE_LENGTH

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def generate_recovery_code(length: int = RECOVERY_CODE_LENGTH) -> str:
    """Generate one random lowercase alphanumeric code."""
    return "".join(secrets.choice(RECOVERY_CODE_ALPHABET) for _ in range(length))


def generate_recovery_codes(count: int = RECOVERY_CODE_COUNT, length: int = RECOVERY_CODE_LENGTH) -> list[str]:
    """
    Generate a batch of distinct recovery codes.

    A duplicate within the batch is drawn again, so the batch always
    holds ``count`` different codes.
    """
    codes: list[str] = []
    while len(codes) < count:
        code = generate_recovery_code(length)
        if code not in codes:
            codes.append(code)
    return codes


def normalize_recovery_code(code) -> str:
    """Lower-case a code and drop everything outside [a-z0-9]."""
    if not isinstance(code, str):
        return ""
    return _NON_ALNUM.sub("", code.lower())


def hash_recovery_code(code: str) -> str:
    """Digest stored in place of the plain code."""
    return hashlib.sha256(normalize_recovery_code(code).encode()).hexdigest()


def verify_backup_code(candidate_code, available_codes: Iterable[str]) -> bool:
    """
    Check a candidate against the currently available codes.

    ``available_codes`` are plain codes. This never consumes anything;
    the caller removes the code once the login has been accepted.
    """
    candidate = normalize_recovery_code(candidate_code)
    if not candidate:
        return False
    return any(candidate == normalize_recovery_code(code) for code in available_codes)


def verify_backup_code_hash(candidate_code, available_hashes: Iterable[str]) -> bool:
    """Same as :func:`verify_backup_code`, against stored digests."""
    if not normalize_recovery_code(candidate_code):
        return False
    return hash_recovery_code(candidate_code) in set(available_hashes)
