# src/cache/base_cache_store.py — v1
"""Abstract cache record store interface."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from pydantic import ValidationError

from binboh.cache.models import CacheRecord
from binboh.core.errors import BinbohError
from binboh.core.models import CallIdentity

logger = logging.getLogger(__name__)


class CacheWriteError(BinbohError):
    """A record could not be persisted. The run's result is not memoized."""


class BaseRecordStore(ABC):
    """One record per CallIdentity, last write wins.

    load() never fails: an absent, unreadable or corrupt record is reported
    as None. save() replaces the previous record atomically or raises
    CacheWriteError.
    """

    @abstractmethod
    async def load(self, identity: CallIdentity) -> CacheRecord | None:
        """Retrieve the record stored for this identity."""

    @abstractmethod
    async def save(self, identity: CallIdentity, record: CacheRecord) -> None:
        """Store a record, replacing any previous one."""

    def close(self) -> None:
        """Release backend resources."""


def parse_record(raw: str | bytes, source: str) -> CacheRecord | None:
    """Deserialize a stored record, returning None if it is corrupt."""
    try:
        return CacheRecord.model_validate_json(raw)
    except (ValidationError, ValueError) as e:
        logger.warning("Ignoring corrupt cache record %s: %s", source, e)
        return None
