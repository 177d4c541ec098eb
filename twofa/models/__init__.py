from .two_factor import RecoveryCode, TwoFactorAuth

__all__ = [
    "RecoveryCode",
    "TwoFactorAuth",
]
