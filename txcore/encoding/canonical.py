"""
Domain-separated signable bytes
===============================

Every hashable object is hashed (and signed) as

    signable = tag || canonical_msgpack(obj)

where `tag` is a short ASCII prefix naming the object kind. The prefix keeps
a transaction's bytes from ever being read as the bytes of a group, a block or
a vote that happens to encode identically.

Known tags (wire contract, never change):

- "TX"  transaction                 (txcore.types.tx)
- "TG"  transaction group digest    (txcore.types.group)

Public helpers:
- signable_bytes(tag, obj) -> bytes
- hash_obj(tag, obj) -> bytes           SHA-512/256 of the above
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Union

from txcore.encoding.msgpack import dumps
from txcore.utils.hash import sha512_256


class HashID(str, Enum):
    TRANSACTION = "TX"
    TX_GROUP = "TG"

    def prefix(self) -> bytes:
        return self.value.encode("ascii")


def _prefix(tag: Union[HashID, str]) -> bytes:
    if isinstance(tag, HashID):
        return tag.prefix()
    return HashID(tag).prefix()


def signable_bytes(tag: Union[HashID, str], obj: Any) -> bytes:
    """`tag` followed by the canonical encoding of `obj`."""
    return _prefix(tag) + dumps(obj)


def hash_obj(tag: Union[HashID, str], obj: Any) -> bytes:
    """SHA-512/256 over `signable_bytes(tag, obj)`; 32 bytes."""
    return sha512_256(signable_bytes(tag, obj))


__all__ = ["HashID", "signable_bytes", "hash_obj"]
