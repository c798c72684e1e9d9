"""
txcore.types.group
==================

Atomic transaction groups.

A group is identified by the digest of the ordered list of its members'
transaction ids, each computed with the member's `grp` field cleared:

    TxGroup { txlist: [txid_1, txid_2, ...] }
    group_id = sha512_256(b"TG" || canonical_msgpack(TxGroup))

Members then carry that digest in `grp`, so a member's *own* id (computed
with `grp` set) differs from the id that went into the group. Order matters:
reordering members gives a different group id.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from txcore.encoding.canonical import HashID, hash_obj
from txcore.encoding.msgpack import dumps, loads
from txcore.errors import GroupInvalid
from txcore.types.primitives import Digest
from txcore.types.tx import Transaction
from txcore.types.wire import ListOf, WireStruct, tag
from txcore.utils.bytes import b32encode_nopad

log = logging.getLogger("txcore.group")

MAX_GROUP_SIZE = 16


@dataclass(frozen=True)
class TxGroup(WireStruct):
    tx_group_hashes: Tuple[Digest, ...] = tag("txlist", ListOf(Digest))

    @classmethod
    def from_transactions(cls, txns: Iterable[Transaction]) -> "TxGroup":
        """Member ids in order, each taken with the group field cleared."""
        return cls(tx_group_hashes=tuple(tx.without_group().raw_id() for tx in txns))

    def __len__(self) -> int:
        return len(self.tx_group_hashes)

    def to_msgpack(self) -> bytes:
        return dumps(self)

    @classmethod
    def from_msgpack(cls, data: bytes, *, strict: bool = True) -> "TxGroup":
        return cls.from_obj(loads(data, strict=strict))

    def signable_bytes(self) -> bytes:
        return HashID.TX_GROUP.prefix() + self.to_msgpack()

    def group_id(self) -> Digest:
        return Digest(hash_obj(HashID.TX_GROUP, self))


def group_id(group: TxGroup) -> Digest:
    return group.group_id()


def compute_group_id(txns: Iterable[Transaction]) -> Digest:
    """Group digest for `txns` in the given order. No size checks."""
    return TxGroup.from_transactions(txns).group_id()


def assign_group_id(
    txns: Sequence[Transaction], *, max_size: Optional[int] = None
) -> List[Transaction]:
    """
    Compute the group id for `txns` and return copies carrying it in `grp`.

    Any group id already present on an input is ignored, so re-grouping an
    already grouped list yields the same digest.

    Raises GroupInvalid for an empty list or more than `max_size` members
    (default MAX_GROUP_SIZE).
    """
    limit = MAX_GROUP_SIZE if max_size is None else max_size
    txns = list(txns)
    if not txns:
        raise GroupInvalid("group has no transactions")
    if len(txns) > limit:
        raise GroupInvalid("too many transactions in group", size=len(txns), max_size=limit)

    gid = compute_group_id(txns)
    log.debug(
        "assigned group id",
        extra={"group_id": b32encode_nopad(gid), "size": len(txns)},
    )
    return [tx.with_group(gid) for tx in txns]


__all__ = [
    "MAX_GROUP_SIZE",
    "TxGroup",
    "group_id",
    "compute_group_id",
    "assign_group_id",
]
