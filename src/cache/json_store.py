# src/cache/json_store.py — v2
"""JSON file-based record store (default CACHE_BACKEND=json).

Stores one JSON file per call identity under the cache root, sharded by
the first two byte pairs of the identity:

    <root>/ab/cd/abcd....json

Writes go to a temp file in the target directory and are moved into
place with os.replace, so a concurrent reader sees either the old or the
new record, never a torn one.
"""

from __future__ import annotations

import contextlib
import logging
import os
import tempfile
from pathlib import Path

from binboh.cache.base_cache_store import BaseRecordStore, CacheWriteError, parse_record
from binboh.cache.models import CacheRecord
from binboh.core.models import CallIdentity

logger = logging.getLogger(__name__)


class JsonRecordStore(BaseRecordStore):
    """File-based record store using JSON files."""

    def __init__(self, cache_root: Path | str) -> None:
        self._root = Path(cache_root).expanduser()

    @property
    def root(self) -> Path:
        return self._root

    def record_path(self, identity: CallIdentity) -> Path:
        """Return file path for a call identity."""
        key = identity.hex()
        return self._root / key[0:2] / key[2:4] / f"{key}.json"

    async def load(self, identity: CallIdentity) -> CacheRecord | None:
        """Retrieve the record for an identity."""
        path = self.record_path(identity)
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            logger.debug("Previous run not found: %s", path)
            return None
        except OSError as e:
            logger.warning("Failed to read cache record %s: %s", path, e)
            return None
        logger.debug("Loading previous run from: %s", path)
        return parse_record(raw, str(path))

    async def save(self, identity: CallIdentity, record: CacheRecord) -> None:
        """Atomically replace the record for an identity."""
        path = self.record_path(identity)
        payload = record.model_dump_json(indent=2)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{path.stem[:16]}.", suffix=".tmp", dir=path.parent
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(payload)
                    fh.flush()
                    os.fsync(fh.fileno())
                os.replace(tmp_name, path)
            except BaseException:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            raise CacheWriteError(f"Failed to write cache record {path}: {e}") from e
        logger.debug("Wrote cache record: %s", path)
