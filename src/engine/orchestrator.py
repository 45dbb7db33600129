# src/engine/orchestrator.py — v2
"""Memoizer: identity -> load -> hash -> decide -> maybe run -> maybe record.

Steps are strictly sequential. The new record is only built and saved
once the command has exited successfully, so a failed or interrupted run
leaves the previous record untouched.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from binboh.cache.models import CacheRecord
from binboh.core.models import Call, Decision, MemoOutcome
from binboh.engine.decision import decide
from binboh.engine.executor import CommandExecutor
from binboh.hashing.hasher import FileHasher
from binboh.hashing.identity import identify
from binboh.logging.context import set_call_context, set_phase

if TYPE_CHECKING:
    from binboh.cache.base_cache_store import BaseRecordStore
    from binboh.config.settings import Settings

logger = logging.getLogger(__name__)


class Memoizer:
    """Run a call only when its declared files changed since the last success.

    Args:
        store: Record store holding one record per call identity.
        hasher: File hasher, default settings if omitted.
        executor: Command executor, inheriting stdio if omitted.
    """

    def __init__(
        self,
        store: BaseRecordStore,
        hasher: FileHasher | None = None,
        executor: CommandExecutor | None = None,
    ) -> None:
        self._store = store
        self._hasher = hasher or FileHasher()
        self._executor = executor or CommandExecutor()

    @classmethod
    def from_settings(
        cls, settings: Settings, capture_output: bool = False
    ) -> Memoizer:
        """Build a memoizer wired to the configured backend."""
        from binboh.cache.cache_factory import create_record_store

        return cls(
            store=create_record_store(settings),
            hasher=FileHasher(
                max_workers=settings.hash_workers,
                chunk_size=settings.hash_chunk_size,
            ),
            executor=CommandExecutor(capture_output=capture_output),
        )

    @property
    def store(self) -> BaseRecordStore:
        return self._store

    async def run(self, call: Call) -> MemoOutcome:
        """Memoized execution of one call.

        The log phase is reset when the call ends, whether it returns or
        raises.

        Raises:
            UnreadableFileError: A declared file exists but cannot be read.
            CommandLaunchError: The command could not be started.
            CacheWriteError: The command succeeded but its record was not saved.
        """
        try:
            return await self._run(call)
        finally:
            set_phase(None)

    async def _run(self, call: Call) -> MemoOutcome:
        set_phase("identify")
        identity = identify(call)
        set_call_context(identity.short)

        set_phase("load")
        record = await self._store.load(identity)
        if record is None:
            logger.debug("No previous run found. Need to rerun.")

        set_phase("hash")
        current = await self._hasher.snapshot(call)

        set_phase("decide")
        report = decide(call, record, current)
        if not report.should_run:
            logger.debug("All files unchanged, skipping: %s", call.command_line)
            return MemoOutcome(
                identity=identity, decision=Decision.SKIP, reason=report.reason
            )

        if report.path is not None:
            logger.info(
                "Rerunning, %s: %s (%s -> %s)",
                report.reason, report.path, report.recorded, report.current,
            )
        else:
            logger.info("Rerunning, %s", report.reason)

        set_phase("execute")
        result = await self._executor.execute(call)
        if not result.succeeded:
            logger.warning(
                "Command failed (exit_code=%d, signal=%s); cache record left unchanged",
                result.exit_code, result.signal,
            )
            return MemoOutcome(
                identity=identity,
                decision=Decision.RUN,
                reason=report.reason,
                execution=result,
                changed_path=report.path,
            )

        # Record holds post-run digests of inputs and outputs.
        set_phase("record")
        post_run = await self._hasher.snapshot(call)
        new_record = CacheRecord.from_snapshot(call, post_run)
        await self._store.save(identity, new_record)
        logger.debug("Saved cache record for %s", identity.hex())

        return MemoOutcome(
            identity=identity,
            decision=Decision.RUN,
            reason=report.reason,
            execution=result,
            record_saved=True,
            changed_path=report.path,
        )
