"""In-process store, used for tests and single-process deployments."""

import asyncio

from twofa.core.records import TwoFactorSecret
from twofa.core.recovery_codes import hash_recovery_code
from twofa.stores.base import TwoFactorStore


class InMemoryTwoFactorStore(TwoFactorStore):
    def __init__(self):
        self._records: dict[str, TwoFactorSecret] = {}
        self._lock = asyncio.Lock()

    async def load(self, owner_id: str) -> TwoFactorSecret | None:
        return self._records.get(str(owner_id))

    async def save(self, record: TwoFactorSecret) -> None:
        async with self._lock:
            self._records[record.owner_id] = record

    async def delete(self, owner_id: str) -> bool:
        async with self._lock:
            return self._records.pop(str(owner_id), None) is not None

    async def remove_recovery_code(self, owner_id: str, code: str) -> bool:
        code_hash = hash_recovery_code(code)
        async with self._lock:
            record = self._records.get(str(owner_id))
            if record is None or code_hash not in record.recovery_codes:
                return False
            self._records[record.owner_id] = record.without_recovery_code(code_hash)
            return True
