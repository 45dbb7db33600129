# src/logging/context.py — v1
"""Contextual logging support: attach call_id and phase to log records."""

from __future__ import annotations

import contextvars
from dataclasses import dataclass
from typing import Any

# Set once per invocation; phase advances as the memoizer progresses.
_call_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "call_id", default=None
)
_phase: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "phase", default=None
)


@dataclass
class LogContext:
    """Snapshot of current logging context."""

    call_id: str | None = None
    phase: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(call_id=_call_id.get(), phase=_phase.get())


def set_call_context(call_id: str) -> None:
    """Set the identity of the call being processed."""
    _call_id.set(call_id)


def set_phase(phase: str | None) -> None:
    """Set the current processing phase (identify, load, hash, ...)."""
    _phase.set(phase)


def clear_context() -> None:
    """Reset all context variables."""
    _call_id.set(None)
    _phase.set(None)
