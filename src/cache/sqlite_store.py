# src/cache/sqlite_store.py — v3
"""SQLite-based record store (CACHE_BACKEND=sqlite).

Uses stdlib sqlite3, no external dependency. Keeps every record in a
single database file instead of one file per identity. Each save is its
own transaction, so readers observe the old or the new row.

A database file that SQLite reports as corrupt is moved aside to
<name>.corrupt and replaced by an empty one, so a damaged cache costs
one rerun per call instead of failing every save.
"""

from __future__ import annotations

import contextlib
import logging
import os
import sqlite3
from pathlib import Path

from binboh.cache.base_cache_store import BaseRecordStore, CacheWriteError, parse_record
from binboh.cache.models import CacheRecord
from binboh.core.models import CallIdentity

logger = logging.getLogger(__name__)

CORRUPT_SUFFIX = ".corrupt"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS cache_records (
    identity TEXT PRIMARY KEY,
    data TEXT NOT NULL,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);
"""


def _is_corruption(error: sqlite3.Error) -> bool:
    # "file is not a database" and "database disk image is malformed" are
    # raised as plain DatabaseError; locks and I/O use its subclasses.
    return type(error) is sqlite3.DatabaseError


class SqliteRecordStore(BaseRecordStore):
    """SQLite-backed record store. The connection is opened on first use."""

    def __init__(self, db_path: Path | str) -> None:
        self._db_path = Path(db_path).expanduser()
        self._conn: sqlite3.Connection | None = None

    @property
    def db_path(self) -> Path:
        return self._db_path

    @property
    def corrupt_path(self) -> Path:
        return self._db_path.with_name(self._db_path.name + CORRUPT_SUFFIX)

    def _open(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path))
        try:
            conn.execute("PRAGMA journal_mode=WAL")
            conn.executescript(_SCHEMA)
        except sqlite3.Error:
            conn.close()
            raise
        return conn

    def _connect(self) -> sqlite3.Connection:
        if self._conn is None:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
            try:
                self._conn = self._open()
            except sqlite3.DatabaseError as e:
                if not _is_corruption(e):
                    raise
                self._discard_database(e)
                self._conn = self._open()
        return self._conn

    def _discard_database(self, error: sqlite3.Error) -> None:
        """Move a corrupt database file aside, along with its WAL files."""
        self.close()
        logger.warning(
            "Cache database %s is corrupt (%s); moving it to %s",
            self._db_path, error, self.corrupt_path,
        )
        os.replace(self._db_path, self.corrupt_path)
        for suffix in ("-wal", "-shm"):
            with contextlib.suppress(FileNotFoundError):
                os.unlink(f"{self._db_path}{suffix}")

    def _upsert(self, key: str, payload: str) -> None:
        conn = self._connect()
        with conn:
            conn.execute(
                """INSERT OR REPLACE INTO cache_records
                   (identity, data, updated_at)
                   VALUES (?, ?, CURRENT_TIMESTAMP)""",
                (key, payload),
            )

    async def load(self, identity: CallIdentity) -> CacheRecord | None:
        """Retrieve the record for an identity."""
        try:
            row = (
                self._connect()
                .execute(
                    "SELECT data FROM cache_records WHERE identity = ?",
                    (identity.hex(),),
                )
                .fetchone()
            )
        except (sqlite3.Error, OSError) as e:
            logger.warning("Failed to read cache database %s: %s", self._db_path, e)
            return None
        if row is None:
            logger.debug("Previous run not found: %s", identity.hex())
            return None
        return parse_record(row[0], f"{self._db_path}#{identity.hex()}")

    async def save(self, identity: CallIdentity, record: CacheRecord) -> None:
        """Store a record (upsert)."""
        payload = record.model_dump_json()
        try:
            try:
                self._upsert(identity.hex(), payload)
            except sqlite3.DatabaseError as e:
                if not _is_corruption(e):
                    raise
                self._discard_database(e)
                self._upsert(identity.hex(), payload)
        except (sqlite3.Error, OSError) as e:
            raise CacheWriteError(
                f"Failed to write cache record to {self._db_path}: {e}"
            ) from e

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
