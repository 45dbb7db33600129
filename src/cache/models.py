# src/cache/models.py — v2
"""Cache domain models: DigestEntry, CacheRecord.

A record is the snapshot of every declared file's digest taken right
after the last successful run of a call.

Paths and command tokens that are not valid Unicode (undecodable OS bytes
carried as lone surrogates) are written as {"fsbytes": "<hex>"} objects
holding their surrogatepass UTF-8 encoding. Every other token is a plain
JSON string.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, Literal

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
)

from binboh.core.models import Call, DigestSnapshot, FileDigest

RECORD_FORMAT = "binboh.record"
RECORD_VERSION = 1
FS_BYTES_KEY = "fsbytes"


def _dump_token(value: str) -> Any:
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        return {FS_BYTES_KEY: value.encode("utf-8", "surrogatepass").hex()}
    return value


def _load_token(value: object) -> object:
    if isinstance(value, dict) and set(value) == {FS_BYTES_KEY}:
        raw = value[FS_BYTES_KEY]
        if not isinstance(raw, str):
            raise ValueError(f"{FS_BYTES_KEY} must be a hex string")
        return bytes.fromhex(raw).decode("utf-8", "surrogatepass")
    return value


# Round-trips any Python str, including lone surrogates, through JSON.
RecordToken = Annotated[
    str,
    BeforeValidator(_load_token),
    PlainSerializer(_dump_token, return_type=Any, when_used="json"),
]


class DigestEntry(BaseModel):
    """One declared path and its encoded digest."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    path: RecordToken
    digest: str

    @field_validator("digest")
    @classmethod
    def validate_digest(cls, v: str) -> str:
        FileDigest.decode(v)
        return v

    def file_digest(self) -> FileDigest:
        return FileDigest.decode(self.digest)


class CacheRecord(BaseModel):
    """Persisted digests of one call, keyed externally by its CallIdentity."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    format: Literal["binboh.record"] = RECORD_FORMAT
    version: Literal[1] = RECORD_VERSION
    input_digests: list[DigestEntry]
    output_digests: list[DigestEntry]
    command: list[RecordToken] = Field(default_factory=list)
    created_at: datetime

    @classmethod
    def from_snapshot(
        cls,
        call: Call,
        snapshot: DigestSnapshot,
        created_at: datetime | None = None,
    ) -> CacheRecord:
        """Build a record pairing each declared path with its digest."""
        if len(snapshot.inputs) != len(call.inputs) or len(snapshot.outputs) != len(
            call.outputs
        ):
            raise ValueError("Snapshot does not match the call's declared paths")
        return cls(
            input_digests=[
                DigestEntry(path=p, digest=d.encode())
                for p, d in zip(call.inputs, snapshot.inputs)
            ],
            output_digests=[
                DigestEntry(path=p, digest=d.encode())
                for p, d in zip(call.outputs, snapshot.outputs)
            ],
            command=list(call.command),
            created_at=created_at or datetime.now(timezone.utc),
        )
