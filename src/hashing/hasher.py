# src/hashing/hasher.py — v1
"""File content hashing.

SHA-256 over the raw bytes of a file, read in fixed-size chunks. A file
that does not exist maps to the absent digest. Any other read failure
(directory, permission denied) is fatal for the call, since no digest can
be trusted for it.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
from pathlib import Path

from binboh.core.errors import BinbohError
from binboh.core.models import Call, DigestSnapshot, FileDigest

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 1024 * 1024
DEFAULT_MAX_WORKERS = 4


class UnreadableFileError(BinbohError):
    """A declared file exists but its content cannot be read."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Cannot read declared file {path}: {reason}")
        self.path = path
        self.reason = reason


def digest_file(
    path: str | Path,
    working_directory: str | Path | None = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> FileDigest:
    """Compute the content digest of one file.

    Args:
        path: File path, relative paths resolved against working_directory.
        working_directory: Base directory for relative paths.
        chunk_size: Read buffer size in bytes.

    Returns:
        FileDigest of the content, or FileDigest.absent() if missing.

    Raises:
        UnreadableFileError: If the path exists but cannot be read.
    """
    target = Path(path)
    if working_directory is not None:
        target = Path(working_directory) / target

    hasher = hashlib.sha256()
    try:
        with target.open("rb") as fh:
            while True:
                chunk = fh.read(chunk_size)
                if not chunk:
                    break
                hasher.update(chunk)
    except FileNotFoundError:
        logger.debug("File does not exist, using absent digest: %s", target)
        return FileDigest.absent()
    except OSError as e:
        raise UnreadableFileError(target, e.strerror or str(e)) from e

    digest = FileDigest(value=hasher.digest())
    logger.debug("Hashed %s: %s", target, digest.encode())
    return digest


class FileHasher:
    """Hash every declared file of a call, in parallel worker threads.

    Each distinct resolved path is read once per snapshot even when it is
    declared several times (or as both input and output).
    """

    def __init__(
        self,
        max_workers: int = DEFAULT_MAX_WORKERS,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        self._max_workers = max_workers
        self._chunk_size = chunk_size

    async def snapshot(self, call: Call) -> DigestSnapshot:
        """Digest all inputs and outputs of a call.

        Returns only once every path has been hashed.

        Raises:
            UnreadableFileError: If any declared path cannot be read.
        """
        resolved = [call.resolve(p) for p in (*call.inputs, *call.outputs)]
        unique = list(dict.fromkeys(resolved))
        semaphore = asyncio.Semaphore(self._max_workers)

        async def _digest(path: Path) -> FileDigest:
            async with semaphore:
                return await asyncio.to_thread(
                    digest_file, path, None, self._chunk_size
                )

        digests = await asyncio.gather(*(_digest(p) for p in unique))
        by_path = dict(zip(unique, digests))

        n_inputs = len(call.inputs)
        return DigestSnapshot(
            inputs=tuple(by_path[p] for p in resolved[:n_inputs]),
            outputs=tuple(by_path[p] for p in resolved[n_inputs:]),
        )
