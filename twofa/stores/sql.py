"""SQLAlchemy-backed store for two-factor records."""

import logging
from datetime import timezone

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from twofa.core.records import TwoFactorSecret
from twofa.core.recovery_codes import hash_recovery_code
from twofa.models.two_factor import RecoveryCode, TwoFactorAuth
from twofa.stores.base import TwoFactorStore

logger = logging.getLogger(__name__)


class SQLAlchemyTwoFactorStore(TwoFactorStore):
    """
    Store records in the ``two_factor_auth`` and ``recovery_codes`` tables.

    Recovery-code consumption is one ``DELETE ... WHERE owner_id AND
    code_hash`` statement; the affected row count tells the caller whether
    it was the request that removed the code.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def load(self, owner_id: str) -> TwoFactorSecret | None:
        owner_id = str(owner_id)
        result = await self.db.execute(
            select(TwoFactorAuth.secret, TwoFactorAuth.created_at).where(TwoFactorAuth.owner_id == owner_id)
        )
        row = result.one_or_none()
        if row is None:
            return None

        codes = await self.db.execute(
            select(RecoveryCode.code_hash).where(RecoveryCode.owner_id == owner_id).order_by(RecoveryCode.position)
        )

        created_at = row.created_at
        if created_at is not None and created_at.tzinfo is None:
            # SQLite drops the offset; values are always written in UTC
            created_at = created_at.replace(tzinfo=timezone.utc)

        return TwoFactorSecret(
            owner_id=owner_id,
            secret=row.secret,
            recovery_codes=tuple(codes.scalars().all()),
            created_at=created_at,
        )

    async def save(self, record: TwoFactorSecret) -> None:
        await self._delete_rows(record.owner_id)

        tfa = TwoFactorAuth(
            owner_id=record.owner_id,
            secret=record.secret,
            created_at=record.created_at,
        )
        tfa.recovery_codes = [
            RecoveryCode(owner_id=record.owner_id, position=position, code_hash=code_hash)
            for position, code_hash in enumerate(record.recovery_codes)
        ]
        self.db.add(tfa)
        await self.db.commit()

    async def delete(self, owner_id: str) -> bool:
        existed = await self._delete_rows(str(owner_id))
        await self.db.commit()
        return existed

    async def remove_recovery_code(self, owner_id: str, code: str) -> bool:
        result = await self.db.execute(
            delete(RecoveryCode).where(
                RecoveryCode.owner_id == str(owner_id),
                RecoveryCode.code_hash == hash_recovery_code(code),
            )
        )
        await self.db.commit()
        return result.rowcount == 1

    async def _delete_rows(self, owner_id: str) -> bool:
        await self.db.execute(delete(RecoveryCode).where(RecoveryCode.owner_id == owner_id))
        result = await self.db.execute(delete(TwoFactorAuth).where(TwoFactorAuth.owner_id == owner_id))
        return result.rowcount > 0
