"""
txcore.utils.bytes
------------------

Byte normalization and the three text encodings the package deals in:

- hex      (`0x`-prefixed on output; prefix optional on input), for logs and CLI
- base32   (RFC 4648, uppercase, no padding), the transaction id text form
- base64   (standard alphabet, padded), the transport form of msgpack blobs

Decoders raise ValueError on malformed text; callers turn that into their own
error type.

>>> to_hex(b"\\x01\\x02")
'0x0102'
>>> b32encode_nopad(b"\\x00" * 5)
'AAAAAAAA'
"""

from __future__ import annotations

import base64
import binascii
from typing import Union

BytesLike = Union[bytes, bytearray, memoryview]

# Unpadded base32 lengths (mod 8) that no byte string encodes to.
_B32_IMPOSSIBLE_TAILS = (1, 3, 6)


def is_byteslike(x: object) -> bool:
    return isinstance(x, (bytes, bytearray, memoryview))


def strip0x(s: str) -> str:
    return s[2:] if s[:2] in ("0x", "0X") else s


def to_hex(data: BytesLike, *, prefix: bool = True) -> str:
    if not is_byteslike(data):
        raise TypeError(f"to_hex needs bytes, got {type(data).__name__}")
    return ("0x" if prefix else "") + bytes(data).hex()


def from_hex(h: str) -> bytes:
    if not isinstance(h, str):
        raise TypeError(f"from_hex needs str, got {type(h).__name__}")
    digits = strip0x(h.strip())
    if len(digits) % 2:
        digits = "0" + digits
    try:
        return bytes.fromhex(digits)
    except ValueError as e:
        raise ValueError(f"not a hex string: {h!r}") from e


def b(x: Union[BytesLike, str]) -> bytes:
    """bytes from bytes-like, or from str (`0x…` as hex, anything else as UTF-8)."""
    if is_byteslike(x):
        return bytes(x)  # type: ignore[arg-type]
    if isinstance(x, str):
        return from_hex(x) if x[:2] in ("0x", "0X") else x.encode("utf-8")
    raise TypeError(f"cannot make bytes from {type(x).__name__}")


def expect_len(data: BytesLike, n: int, *, name: str = "bytes") -> bytes:
    raw = b(data)
    if len(raw) != n:
        raise ValueError(f"{name} needs exactly {n} bytes, got {len(raw)}")
    return raw


def b32encode_nopad(data: BytesLike) -> str:
    return base64.b32encode(bytes(data)).decode("ascii").rstrip("=")


def b32decode_nopad(text: str) -> bytes:
    """Inverse of `b32encode_nopad`. Padding is tolerated; lowercase is not."""
    if not isinstance(text, str):
        raise TypeError("b32decode_nopad needs str")
    s = text.strip().rstrip("=")
    if len(s) % 8 in _B32_IMPOSSIBLE_TAILS:
        raise ValueError(f"invalid base32 length {len(s)}")
    try:
        return base64.b32decode(s + "=" * (-len(s) % 8), casefold=False)
    except binascii.Error as e:
        raise ValueError(f"invalid base32 text: {e}") from e


def b64encode(data: BytesLike) -> str:
    return base64.b64encode(bytes(data)).decode("ascii")


def b64decode(text: Union[str, bytes]) -> bytes:
    """Strict base64; whitespace (e.g. a trailing newline) is ignored."""
    if isinstance(text, bytes):
        text = text.decode("ascii")
    try:
        return base64.b64decode("".join(text.split()), validate=True)
    except binascii.Error as e:
        raise ValueError(f"invalid base64 text: {e}") from e


__all__ = [
    "BytesLike",
    "is_byteslike",
    "strip0x",
    "to_hex",
    "from_hex",
    "b",
    "expect_len",
    "b32encode_nopad",
    "b32decode_nopad",
    "b64encode",
    "b64decode",
]
