# src/core/models.py — v2
"""Shared Pydantic domain models used across modules.

Digests and identities are newtypes over fixed-size byte strings. They
compare only against their own type and expose nothing beyond equality
and an explicit encode/decode pair.
"""

from __future__ import annotations

import os
import shlex
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, field_validator

DIGEST_SIZE = 32
ABSENT_MARKER = "absent"


# === CALL ===


class Call(BaseModel):
    """One memoizable unit of work: where, which files, which command."""

    model_config = ConfigDict(frozen=True)

    working_directory: str
    inputs: tuple[str, ...] = ()
    outputs: tuple[str, ...] = ()
    command: tuple[str, ...]

    @field_validator("working_directory", mode="before")
    @classmethod
    def validate_working_directory(cls, v: object) -> str:
        if not isinstance(v, (str, os.PathLike)):
            raise ValueError("working_directory must be a path")
        path = os.fspath(v)
        if not os.path.isabs(path):
            raise ValueError(f"working_directory must be absolute, got {path!r}")
        return path

    @field_validator("inputs", "outputs", "command", mode="before")
    @classmethod
    def coerce_paths(cls, v: object) -> object:
        if isinstance(v, (list, tuple)):
            return tuple(
                os.fspath(item) if isinstance(item, os.PathLike) else item
                for item in v
            )
        return v

    @field_validator("command")
    @classmethod
    def validate_command(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        if not v:
            raise ValueError("command must contain at least the program to run")
        return v

    def resolve(self, path: str) -> Path:
        """Resolve a declared path against the working directory."""
        return Path(self.working_directory) / path

    @property
    def command_line(self) -> str:
        """Shell-quoted command for display.

        Undecodable bytes show as backslash escapes so the line can be
        written to any text stream.
        """
        line = shlex.join(self.command)
        return line.encode("utf-8", "backslashreplace").decode("utf-8")


# === OPAQUE TOKENS ===


class CallIdentity(BaseModel):
    """Deterministic storage key derived from a Call's structural fields."""

    model_config = ConfigDict(frozen=True)

    value: bytes

    @field_validator("value")
    @classmethod
    def validate_size(cls, v: bytes) -> bytes:
        if len(v) != DIGEST_SIZE:
            raise ValueError(f"CallIdentity must be {DIGEST_SIZE} bytes, got {len(v)}")
        return v

    def hex(self) -> str:
        return self.value.hex()

    @classmethod
    def from_hex(cls, text: str) -> CallIdentity:
        return cls(value=bytes.fromhex(text))

    @property
    def short(self) -> str:
        """Abbreviated form for log lines."""
        return self.hex()[:12]

    def __str__(self) -> str:
        return self.hex()


class FileDigest(BaseModel):
    """Content fingerprint of one file, or the distinguished absent state."""

    model_config = ConfigDict(frozen=True)

    value: bytes | None = None

    @field_validator("value")
    @classmethod
    def validate_size(cls, v: bytes | None) -> bytes | None:
        if v is not None and len(v) != DIGEST_SIZE:
            raise ValueError(f"FileDigest must be {DIGEST_SIZE} bytes, got {len(v)}")
        return v

    @classmethod
    def absent(cls) -> FileDigest:
        return cls(value=None)

    @property
    def is_absent(self) -> bool:
        return self.value is None

    def encode(self) -> str:
        """Hex string, or the absent marker."""
        if self.value is None:
            return ABSENT_MARKER
        return self.value.hex()

    @classmethod
    def decode(cls, text: str) -> FileDigest:
        """Inverse of encode(). Raises ValueError on malformed input."""
        if text == ABSENT_MARKER:
            return cls.absent()
        return cls(value=bytes.fromhex(text))

    def __str__(self) -> str:
        return self.encode()


class DigestSnapshot(BaseModel):
    """Current digests of a call's files, positionally aligned with its paths."""

    model_config = ConfigDict(frozen=True)

    inputs: tuple[FileDigest, ...] = ()
    outputs: tuple[FileDigest, ...] = ()


# === DECISION & EXECUTION ===


class Decision(str, Enum):
    """Binary outcome of comparing current digests to a cache record."""

    SKIP = "skip"
    RUN = "run"


class ExecutionResult(BaseModel):
    """Outcome of one child process."""

    exit_code: int
    signal: int | None = None
    stdout: bytes | None = None
    stderr: bytes | None = None
    duration_ms: int = 0

    @property
    def succeeded(self) -> bool:
        return self.signal is None and self.exit_code == 0


class MemoOutcome(BaseModel):
    """What one memoized invocation did."""

    identity: CallIdentity
    decision: Decision
    reason: str
    execution: ExecutionResult | None = None
    record_saved: bool = False
    changed_path: str | None = None

    @property
    def exit_code(self) -> int:
        """Process exit status the invocation should report."""
        if self.execution is None:
            return 0
        if self.execution.signal is not None:
            return 128 + self.execution.signal
        return self.execution.exit_code
