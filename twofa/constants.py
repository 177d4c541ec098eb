"""
Two-Factor Constants

Parameters of the TOTP verification contract and recovery-code format.
These are fixed: authenticator apps and already-issued codes depend on them.
"""

import string

# TOTP (RFC 6238) parameters
TOTP_DIGITS = 6
TOTP_PERIOD_SECONDS = 30
TOTP_VALID_WINDOW = 1  # accept counters C-1, C, C+1

# 20 bytes = 160 bits, encoded as 32 base32 characters
SECRET_BYTES = 20
SECRET_LENGTH = SECRET_BYTES * 8 // 5
BASE32_ALPHABET = string.ascii_uppercase + "234567"

# Recovery codes
RECOVERY_CODE_COUNT = 8
RECOVERY_CODE_LENGTH = 8
RECOVERY_CODE_ALPHABET = string.ascii_lowercase + string.digits

# Manual entry key is shown in groups of this many characters
MANUAL_KEY_GROUP_SIZE = 4
