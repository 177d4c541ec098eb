"""Persistence contract used by the two-factor service."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from twofa.core.records import TwoFactorSecret


class TwoFactorStore(ABC):
    """Abstract base class for two-factor record stores."""

    @abstractmethod
    async def load(self, owner_id: str) -> TwoFactorSecret | None:
        """Return the owner's record, or None when 2FA is not enabled."""
        ...

    @abstractmethod
    async def save(self, record: TwoFactorSecret) -> None:
        """Store a record, replacing any previous one and all of its recovery codes."""
        ...

    @abstractmethod
    async def delete(self, owner_id: str) -> bool:
        """Remove the owner's record. Returns whether one existed."""
        ...

    @abstractmethod
    async def remove_recovery_code(self, owner_id: str, code: str) -> bool:
        """
        Atomically remove a recovery code if it is still present.

        Returns True for exactly one caller per code; later or concurrent
        calls for the same code return False and never raise.
        """
        ...
