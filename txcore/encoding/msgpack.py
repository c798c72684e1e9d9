"""
Canonical MessagePack codec
---------------------------

One canonicalization routine shared by every hashable entity (transactions,
groups, signed envelopes). Two values with equal content always produce the
same bytes:

- Map entries holding a zero value are omitted entirely. Zero values are
  None, False, 0, "", b"", empty list, empty map (after canonicalizing its
  contents) and an all-zero fixed-size value (`FixedBytes`). A
  variable-length byte string is zero only when empty.
- Map keys are written in ascending byte order of their UTF-8 encoding,
  whatever order the caller built them in.
- List elements keep their order and are never dropped.
- Objects exposing `to_obj()` are encoded through it; enums encode as their value.

The wire format is MessagePack written by `msgspec.msgpack`: shortest integer
forms, the `bin` family for bytes and the `str` family for text.

Not supported (rejected with SerializationError):
- float/Decimal
- sets and arbitrary objects
- non-str map keys

Public API:
- canonicalize(obj) -> plain python value
- is_zero(value) -> bool
- dumps(obj) -> bytes
- loads(b: bytes, *, strict=True) -> object
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Mapping

import msgspec

from txcore.errors import DeserializationError, SerializationError
from txcore.types.primitives import FixedBytes

_ENCODER = msgspec.msgpack.Encoder()
_DECODER = msgspec.msgpack.Decoder()

_MAX_DEPTH = 64


def is_zero(value: Any) -> bool:
    """True when `value` is its type's zero value and would be omitted from a map."""
    if value is None or value is False:
        return True
    if isinstance(value, FixedBytes):
        return not any(value)
    if isinstance(value, Enum):
        return is_zero(value.value)
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return value == 0
    if isinstance(value, (str, bytes, bytearray, memoryview, list, tuple, dict)):
        return len(value) == 0
    if hasattr(value, "to_obj"):
        return len(canonicalize(value)) == 0
    return False


def canonicalize(obj: Any, *, _depth: int = 0) -> Any:
    """
    Reduce `obj` to plain str/int/bool/bytes/list/dict with zero-valued map
    entries removed and map keys sorted.
    """
    if _depth > _MAX_DEPTH:
        raise SerializationError("maximum nesting exceeded")

    if hasattr(obj, "to_obj"):
        obj = obj.to_obj()
    if isinstance(obj, Enum):
        obj = obj.value

    if obj is None or isinstance(obj, (bool, int, str)):
        return obj
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return bytes(obj)

    if isinstance(obj, Mapping):
        entries: List[tuple] = []
        for k, v in obj.items():
            if not isinstance(k, str):
                raise SerializationError(
                    "unsupported map key type", key_type=type(k).__name__
                )
            if is_zero(v):
                continue
            cv = canonicalize(v, _depth=_depth + 1)
            # nested maps can become empty once their own zero fields are gone
            if isinstance(cv, dict) and not cv:
                continue
            entries.append((k.encode("utf-8"), k, cv))
        entries.sort(key=lambda e: e[0])
        out: Dict[str, Any] = {}
        for _kb, k, cv in entries:
            out[k] = cv
        return out

    if isinstance(obj, (list, tuple)):
        return [canonicalize(x, _depth=_depth + 1) for x in obj]

    raise SerializationError(
        "unsupported type for canonical encoding", type=type(obj).__name__
    )


def dumps(obj: Any) -> bytes:
    """Encode `obj` to canonical MessagePack bytes."""
    plain = canonicalize(obj)
    try:
        return _ENCODER.encode(plain)
    except (msgspec.EncodeError, OverflowError, TypeError) as e:
        raise SerializationError(str(e) or "msgpack encode failed") from e


def loads(data: bytes, *, strict: bool = True) -> Any:
    """
    Decode MessagePack bytes to plain Python values.

    With `strict=True` the input must already be canonical: re-encoding the
    decoded value must reproduce `data` exactly (sorted keys, no explicit
    zero values, shortest integer forms).
    """
    try:
        obj = _DECODER.decode(bytes(data))
    except (msgspec.DecodeError, TypeError, ValueError) as e:
        raise DeserializationError(str(e) or "msgpack decode failed") from e
    if strict:
        try:
            again = dumps(obj)
        except SerializationError as e:
            raise DeserializationError(
                "value cannot be re-encoded canonically"
            ).with_cause(e)
        if again != bytes(data):
            raise DeserializationError(
                "non-canonical msgpack encoding", size=len(data), canonical_size=len(again)
            )
    return obj


__all__ = ["canonicalize", "is_zero", "dumps", "loads"]
