"""
Signed-transaction envelope.

Only the shape and the canonical encoding live here; verifying signatures,
multisig thresholds and logic programs is the job of the ledger. At most one
of `sig`, `msig`, `lsig` is expected to be populated, but nothing enforces it.

The envelope has no identifier of its own: `SignedTxn.txid()` is the id of
the wrapped transaction.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Tuple, Union

from txcore.encoding.msgpack import dumps, is_zero, loads
from txcore.errors import DeserializationError
from txcore.types.primitives import Address, Digest, Signature
from txcore.types.tx import Transaction
from txcore.types.wire import ListOf, WireStruct, tag
from txcore.utils.bytes import b64decode, b64encode


@dataclass(frozen=True)
class MultisigSubsig(WireStruct):
    key: Address = tag("pk", Address)
    sig: Signature = tag("s", Signature)


@dataclass(frozen=True)
class MultisigSig(WireStruct):
    version: int = tag("v", int)
    threshold: int = tag("thr", int)
    subsigs: Tuple[MultisigSubsig, ...] = tag("subsig", ListOf(MultisigSubsig))


@dataclass(frozen=True)
class LogicSig(WireStruct):
    logic: bytes = tag("l", bytes)
    args: Tuple[bytes, ...] = tag("arg", ListOf(bytes))
    sig: Signature = tag("sig", Signature)
    msig: MultisigSig = tag("msig", MultisigSig)


@dataclass(frozen=True)
class SignedTxn(WireStruct):
    txn: Transaction = tag("txn", Transaction, required=True)
    sig: Signature = tag("sig", Signature)
    msig: MultisigSig = tag("msig", MultisigSig)
    lsig: LogicSig = tag("lsig", LogicSig)
    # Set when the signer is not the sender (rekeyed account).
    auth_addr: Address = tag("sgnr", Address)

    @classmethod
    def from_obj(cls, o: Mapping[str, Any]) -> "SignedTxn":
        if isinstance(o, Mapping) and "txn" not in o:
            raise DeserializationError("signed transaction has no txn")
        return super().from_obj(o)

    def to_msgpack(self) -> bytes:
        return dumps(self)

    @classmethod
    def from_msgpack(cls, data: bytes, *, strict: bool = True) -> "SignedTxn":
        return cls.from_obj(loads(data, strict=strict))

    def to_base64(self) -> str:
        return b64encode(self.to_msgpack())

    @classmethod
    def from_base64(cls, text: Union[str, bytes], *, strict: bool = True) -> "SignedTxn":
        try:
            data = b64decode(text)
        except ValueError as e:
            raise DeserializationError(str(e)) from e
        return cls.from_msgpack(data, strict=strict)

    def raw_id(self) -> Digest:
        return self.txn.raw_id()

    def txid(self) -> str:
        return self.txn.txid()

    def summary(self) -> Dict[str, Any]:
        out = self.txn.summary()
        out["signed_by"] = [
            name
            for name, value in (("sig", self.sig), ("msig", self.msig), ("lsig", self.lsig))
            if not is_zero(value)
        ]
        if not self.auth_addr.is_zero():
            out["auth_addr"] = str(self.auth_addr)
        return out


__all__ = ["MultisigSubsig", "MultisigSig", "LogicSig", "SignedTxn"]
