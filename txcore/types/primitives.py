"""
txcore.types.primitives
=======================

Opaque fixed-size binary values. Their internal structure (checksums, curve
points, signature schemes) belongs to other layers; here they are byte strings
of an exact length whose all-zero value means "unset".

Each type is a `bytes` subclass, so it compares and hashes like plain bytes,
while the canonical encoder can tell a fixed-size value (zero when all bytes
are zero) from a variable-length blob (zero only when empty).
"""

from __future__ import annotations

from typing import ClassVar, Type, TypeVar, Union

from txcore.utils.bytes import BytesLike, b32encode_nopad, expect_len, to_hex

F = TypeVar("F", bound="FixedBytes")


class FixedBytes(bytes):
    SIZE: ClassVar[int] = 0

    def __new__(cls: Type[F], value: Union[BytesLike, None] = None) -> F:
        if value is None:
            value = b"\x00" * cls.SIZE
        data = expect_len(value, cls.SIZE, name=cls.__name__)
        return super().__new__(cls, data)

    @classmethod
    def zero(cls: Type[F]) -> F:
        return cls()

    @classmethod
    def coerce(cls: Type[F], value: Union[BytesLike, None]) -> F:
        """Return `value` as this type (no copy when it already is one)."""
        if isinstance(value, cls):
            return value
        return cls(value)

    def is_zero(self) -> bool:
        return not any(self)

    def __repr__(self) -> str:
        if self.is_zero():
            return f"{type(self).__name__}.zero()"
        return f"{type(self).__name__}({to_hex(self)})"


class Address(FixedBytes):
    """32-byte account public key."""

    SIZE = 32

    def __str__(self) -> str:
        # Raw base32 only: the checksummed text form is an address-layer concern.
        return b32encode_nopad(self)


class Digest(FixedBytes):
    """32-byte SHA-512/256 output."""

    SIZE = 32


class VotePK(FixedBytes):
    SIZE = 32


class VRFPK(FixedBytes):
    SIZE = 32


class Lease(FixedBytes):
    SIZE = 32


class Signature(FixedBytes):
    SIZE = 64


__all__ = [
    "FixedBytes",
    "Address",
    "Digest",
    "VotePK",
    "VRFPK",
    "Lease",
    "Signature",
]
