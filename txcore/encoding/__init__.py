"""
txcore.encoding
===============

Public, stable encoding surface:

- Canonical MessagePack (zero-value omission, sorted map keys)
- Domain-separated signable bytes and their SHA-512/256 digests

Modules
-------
- msgpack.py:   canonicalize / dumps / loads
- canonical.py: HashID tags, signable_bytes, hash_obj

This package intentionally keeps a *very* small public API: every hashable
entity goes through the same two functions.
"""

from __future__ import annotations

from .canonical import HashID, hash_obj, signable_bytes
from .msgpack import canonicalize, is_zero
from .msgpack import dumps as msgpack_dumps
from .msgpack import loads as msgpack_loads

__all__ = [
    "canonicalize",
    "is_zero",
    "msgpack_dumps",
    "msgpack_loads",
    "HashID",
    "signable_bytes",
    "hash_obj",
]
