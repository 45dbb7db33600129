# src/cache/memory_store.py — v1
"""In-process record store (CACHE_BACKEND=memory).

Records are kept serialized so they go through the same encode/decode
path as the on-disk stores. Nothing survives the process.
"""

from __future__ import annotations

from binboh.cache.base_cache_store import BaseRecordStore, parse_record
from binboh.cache.models import CacheRecord
from binboh.core.models import CallIdentity


class MemoryRecordStore(BaseRecordStore):
    """Dict-backed record store for embedding and tests."""

    def __init__(self) -> None:
        self._records: dict[str, str] = {}

    async def load(self, identity: CallIdentity) -> CacheRecord | None:
        raw = self._records.get(identity.hex())
        if raw is None:
            return None
        return parse_record(raw, f"memory:{identity.hex()}")

    async def save(self, identity: CallIdentity, record: CacheRecord) -> None:
        self._records[identity.hex()] = record.model_dump_json()

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, identity: object) -> bool:
        return isinstance(identity, CallIdentity) and identity.hex() in self._records
