"""Content hash of an ordered list of learning targets.

The hash is the identifier the ledger later uses for the module, so the byte
encoding must match the ledger's data serialisation exactly: a CBOR
indefinite-length array of UTF-8 byte strings, where byte strings longer than
64 bytes are split into an indefinite-length sequence of 64-byte chunks. The
digest is Blake2b-256.
"""

from __future__ import annotations

import hashlib
import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

_CHUNK_SIZE = 64
_MAJOR_BYTES = 0x40
_INDEFINITE_ARRAY = 0x9F
_INDEFINITE_BYTES = 0x5F
_BREAK = 0xFF
_HASH_PATTERN = re.compile(r"[0-9a-fA-F]{64}")


def _definite_bytes(chunk: bytes) -> bytes:
    length = len(chunk)
    if length < 24:
        header = bytes([_MAJOR_BYTES | length])
    elif length < 0x100:
        header = bytes([_MAJOR_BYTES | 24, length])
    else:
        header = bytes([_MAJOR_BYTES | 25]) + length.to_bytes(2, "big")
    return header + chunk


def _encode_bytes(value: bytes) -> bytes:
    if len(value) <= _CHUNK_SIZE:
        return _definite_bytes(value)
    chunks = (value[i : i + _CHUNK_SIZE] for i in range(0, len(value), _CHUNK_SIZE))
    return bytes([_INDEFINITE_BYTES]) + b"".join(map(_definite_bytes, chunks)) + bytes([_BREAK])


def encode_targets(texts: Iterable[str]) -> bytes:
    """Serialise learning-target texts the way the ledger does before hashing."""

    body = b"".join(_encode_bytes(text.encode("utf-8")) for text in texts)
    return bytes([_INDEFINITE_ARRAY]) + body + bytes([_BREAK])


def compute_slt_hash(texts: Iterable[str]) -> str:
    """Return the 64-character hex hash for the learning targets, in order."""

    return hashlib.blake2b(encode_targets(texts), digest_size=32).hexdigest()


def verify_slt_hash(texts: Iterable[str], expected: str) -> bool:
    return compute_slt_hash(texts) == expected.lower()


def is_valid_slt_hash(value: str) -> bool:
    return bool(_HASH_PATTERN.fullmatch(value))
