# src/engine/decision.py — v1
"""Invalidation decision: compare current digests to the stored record.

Pure function, no I/O. The digests are computed once by the caller and
passed in, so the same snapshot serves the comparison and the log lines.

Decision flow:
  1. No record                         -> RUN (no_record)
  2. Input/output counts differ        -> RUN (shape_mismatch)
  3. Recorded path differs at position -> RUN (shape_mismatch)
  4. Any input digest differs          -> RUN (input_changed)
  5. Any output digest differs         -> RUN (output_changed)
  6. Otherwise                         -> SKIP (unchanged)
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict

from binboh.cache.models import CacheRecord, DigestEntry
from binboh.core.models import Call, Decision, DigestSnapshot, FileDigest

DecisionReason = Literal[
    "no_record", "shape_mismatch", "input_changed", "output_changed", "unchanged"
]


class DecisionReport(BaseModel):
    """Run/skip verdict with the first difference that caused it."""

    model_config = ConfigDict(frozen=True)

    decision: Decision
    reason: DecisionReason
    path: str | None = None
    recorded: str | None = None
    current: str | None = None

    @property
    def should_run(self) -> bool:
        return self.decision is Decision.RUN


def _run(reason: DecisionReason, **kwargs: str | None) -> DecisionReport:
    return DecisionReport(decision=Decision.RUN, reason=reason, **kwargs)


def _compare(
    changed_reason: DecisionReason,
    paths: tuple[str, ...],
    recorded: list[DigestEntry],
    current: tuple[FileDigest, ...],
) -> DecisionReport | None:
    if len(recorded) != len(paths) or len(current) != len(paths):
        return _run("shape_mismatch")
    for path, entry, digest in zip(paths, recorded, current):
        if entry.path != path:
            return _run("shape_mismatch", path=path)
        if entry.file_digest() != digest:
            return _run(
                changed_reason,
                path=path,
                recorded=entry.digest,
                current=digest.encode(),
            )
    return None


def decide(
    call: Call,
    record: CacheRecord | None,
    current: DigestSnapshot,
) -> DecisionReport:
    """Decide whether a call must run.

    Args:
        call: The call being memoized.
        record: Stored record for the call's identity, if any.
        current: Current digests of the call's inputs and outputs.

    Returns:
        DecisionReport, SKIP only when every digest matches exactly.
    """
    if record is None:
        return _run("no_record")

    mismatch = _compare("input_changed", call.inputs, record.input_digests, current.inputs)
    if mismatch is not None:
        return mismatch

    mismatch = _compare(
        "output_changed", call.outputs, record.output_digests, current.outputs
    )
    if mismatch is not None:
        return mismatch

    return DecisionReport(decision=Decision.SKIP, reason="unchanged")
