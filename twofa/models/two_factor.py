"""
Two-Factor Authentication Models

Stores TOTP secrets and recovery codes for owners who enabled 2FA.
Recovery codes get one row each so a code can be consumed with a single
conditional DELETE.
"""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from twofa.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TwoFactorAuth(Base):
    """
    Enabled two-factor configuration for an owner.

    A row exists only while 2FA is enabled for the owner.
    """

    __tablename__ = "two_factor_auth"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Account identifier (opaque; user id or email)
    owner_id = Column(String(255), unique=True, nullable=False, index=True)

    # TOTP secret (base32, 32 characters)
    secret = Column(String(64), nullable=False)

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    recovery_codes = relationship(
        "RecoveryCode",
        back_populates="two_factor_auth",
        cascade="all, delete-orphan",
        order_by="RecoveryCode.position",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<TwoFactorAuth(owner_id={self.owner_id})>"


class RecoveryCode(Base):
    """One unused recovery code, stored as a SHA-256 digest."""

    __tablename__ = "recovery_codes"
    __table_args__ = (UniqueConstraint("owner_id", "code_hash", name="uq_recovery_codes_owner_hash"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(
        String(255),
        ForeignKey("two_factor_auth.owner_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position = Column(Integer, nullable=False)
    code_hash = Column(String(64), nullable=False)

    two_factor_auth = relationship("TwoFactorAuth", back_populates="recovery_codes")

    def __repr__(self) -> str:
        return f"<RecoveryCode(owner_id={self.owner_id}, position={self.position})>"
