# src/cache/cache_factory.py — v3
"""Factory for record store instantiation."""

from __future__ import annotations

from binboh.cache.base_cache_store import BaseRecordStore
from binboh.config.settings import Settings, default_cache_root

SQLITE_FILENAME = "binboh_cache.db"


def create_record_store(settings: Settings | None = None) -> BaseRecordStore:
    """Instantiate the configured cache backend.

    Args:
        settings: Application settings. Defaults to the JSON backend under
            the platform cache directory.

    Returns:
        Configured BaseRecordStore implementation.
    """
    backend = "json" if settings is None else settings.cache_backend
    cache_root = default_cache_root() if settings is None else settings.cache_root

    if backend == "json":
        from binboh.cache.json_store import JsonRecordStore
        return JsonRecordStore(cache_root=cache_root)

    if backend == "sqlite":
        from binboh.cache.sqlite_store import SqliteRecordStore
        return SqliteRecordStore(db_path=cache_root / SQLITE_FILENAME)

    if backend == "memory":
        from binboh.cache.memory_store import MemoryRecordStore
        return MemoryRecordStore()

    raise ValueError(f"Unsupported cache backend: {backend!r}")
