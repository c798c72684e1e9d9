"""
txcore.utils.hash
=================

SHA-512/256 (FIPS 180-4: SHA-512 internal state, output truncated to 256 bits
with its own initial values). This is the digest behind every identifier in
the package.

Backends
--------
- `hashlib.new("sha512_256")` when the linked OpenSSL provides it (the common case).
- pycryptodome (`Crypto.Hash.SHA512.new(truncate="256")`, also shipped as
  `Cryptodome`) otherwise.

The backend is resolved lazily on first use so importing this module never
fails on an unusual build.
"""

from __future__ import annotations

import hashlib
from typing import Callable, Optional

from txcore.errors import DependencyMissing

from .bytes import BytesLike
from .bytes import b as _b

DIGEST_SIZE = 32
ZERO32 = b"\x00" * DIGEST_SIZE

_impl: Optional[Callable[[bytes], bytes]] = None


def _hashlib_sha512_256(data: bytes) -> bytes:
    return hashlib.new("sha512_256", data).digest()


def _resolve() -> Callable[[bytes], bytes]:
    try:
        hashlib.new("sha512_256", b"")
        return _hashlib_sha512_256
    except ValueError:
        pass

    try:
        from Crypto.Hash import SHA512 as _SHA512  # type: ignore
    except ImportError:
        try:
            from Cryptodome.Hash import SHA512 as _SHA512  # type: ignore
        except ImportError:
            raise DependencyMissing(
                "pycryptodome",
                "hashlib lacks sha512_256 on this build; pip install pycryptodome",
            ) from None

    def _pycryptodome_sha512_256(data: bytes) -> bytes:
        return _SHA512.new(data, truncate="256").digest()

    return _pycryptodome_sha512_256


def sha512_256(data: BytesLike) -> bytes:
    """SHA-512/256 digest (32 bytes)."""
    global _impl
    if _impl is None:
        _impl = _resolve()
    return _impl(_b(data))


__all__ = ["DIGEST_SIZE", "ZERO32", "sha512_256"]
