"""Domain record for an owner's enabled two-factor configuration."""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone

from twofa.core.recovery_codes import hash_recovery_code
from twofa.core.totp import provisioning_uri


@dataclass(frozen=True)
class TwoFactorSecret:
    """
    An owner's 2FA configuration.

    A record exists only while 2FA is enabled. ``secret`` never changes;
    re-setup builds a new record. ``recovery_codes`` holds the stored
    digests of the codes that are still unused, in issue order.
    """

    owner_id: str
    secret: str
    recovery_codes: tuple[str, ...] = ()
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def create(
        cls,
        owner_id: str,
        secret: str,
        recovery_codes: list[str],
        created_at: datetime | None = None,
    ) -> "TwoFactorSecret":
        """Build a record from plain recovery codes as issued at setup."""
        digests: list[str] = []
        for code in recovery_codes:
            digest = hash_recovery_code(code)
            if digest not in digests:
                digests.append(digest)
        return cls(
            owner_id=str(owner_id),
            secret=secret,
            recovery_codes=tuple(digests),
            created_at=created_at or datetime.now(timezone.utc),
        )

    @property
    def remaining_recovery_codes(self) -> int:
        return len(self.recovery_codes)

    def provisioning_uri(self, owner_label: str, issuer: str) -> str:
        return provisioning_uri(self.secret, owner_label, issuer)

    def without_recovery_code(self, code_hash: str) -> "TwoFactorSecret":
        return replace(self, recovery_codes=tuple(c for c in self.recovery_codes if c != code_hash))
