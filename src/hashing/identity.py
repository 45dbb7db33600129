# src/hashing/identity.py — v1
"""Call identity: a storage key derived from a call's structure.

Only the working directory, the path lists and the command line take
part. File contents never do.

Encoding, in order, for each of the four fields:
    tag (1 byte) | item count (u64 BE) | per item: length (u64 BE) + UTF-8 bytes

Tags and lengths make every field boundary explicit, so ["a", "b"] as
inputs can never collide with "a" as input and "b" as output, nor
"ab" with "a" + "b".
"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Sequence

from binboh.core.models import Call, CallIdentity

logger = logging.getLogger(__name__)

_SCHEME = b"binboh.call.v1\x00"
_LENGTH_BYTES = 8

TAG_WORKING_DIRECTORY = b"W"
TAG_INPUTS = b"I"
TAG_OUTPUTS = b"O"
TAG_COMMAND = b"C"


def _encode_field(tag: bytes, items: Sequence[str]) -> bytes:
    parts = [tag, len(items).to_bytes(_LENGTH_BYTES, "big")]
    for item in items:
        raw = item.encode("utf-8", "surrogateescape")
        parts.append(len(raw).to_bytes(_LENGTH_BYTES, "big"))
        parts.append(raw)
    return b"".join(parts)


def encode_call(call: Call) -> bytes:
    """Unambiguous byte serialization of a call's structural fields."""
    return b"".join(
        [
            _SCHEME,
            _encode_field(TAG_WORKING_DIRECTORY, [call.working_directory]),
            _encode_field(TAG_INPUTS, call.inputs),
            _encode_field(TAG_OUTPUTS, call.outputs),
            _encode_field(TAG_COMMAND, call.command),
        ]
    )


def identify(call: Call) -> CallIdentity:
    """Derive the deterministic CallIdentity of a call."""
    identity = CallIdentity(value=hashlib.sha256(encode_call(call)).digest())
    logger.debug("Hashing working directory path: %s", call.working_directory)
    logger.debug("Hashing input file paths: %s", list(call.inputs))
    logger.debug("Hashing output file paths: %s", list(call.outputs))
    logger.debug("Hashing command: %s", list(call.command))
    logger.debug("Call identity: %s", identity.hex())
    return identity
