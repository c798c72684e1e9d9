"""
txcore/types/tx.py
==================

Transaction model, its flat wire layout and the transaction identifier.

Design highlights
-----------------
- **Kinds**: `pay`, `keyreg`, `acfg`, `axfer`, `afrz` (enum `TxType`, closed set).
- **Model**: a tagged variant. `Transaction(type, header, payload)` carries the
  common `Header` plus exactly the payload dataclass of its type.
- **Wire**: one flat map. Header and payload fields share a single tag table
  (`snd`, `fee`, `fv`, `lv`, `rcv`, `amt`, ...) and zero-valued fields are
  omitted by the canonical encoder, so the in-memory shape never shows up on
  the wire.
- **TxID**: `sha512_256(b"TX" || canonical_msgpack(tx))`, 32 bytes; the display
  form is unpadded uppercase base32 (52 characters).
- **No consistency checks**: nothing here checks that the populated fields
  make sense for the type. The ledger rejects such transactions later.

Zero means unset: a payment of amount 0 encodes exactly like a payment with
no amount. That is part of the wire format, not a bug.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Type, Union

from txcore.encoding.canonical import HashID, hash_obj
from txcore.encoding.canonical import signable_bytes as _signable_bytes
from txcore.encoding.msgpack import dumps, is_zero, loads
from txcore.errors import DeserializationError, HashMismatch, TxInvalid
from txcore.types.primitives import VRFPK, Address, Digest, Lease, VotePK
from txcore.types.wire import WireStruct, tag, wire_fields, zero_of
from txcore.utils.bytes import (
    b32decode_nopad,
    b32encode_nopad,
    b64decode,
    b64encode,
    to_hex,
)

TXID_LEN = 32
TXID_TEXT_LEN = 52


class TxType(str, Enum):
    PAYMENT = "pay"
    KEYREG = "keyreg"
    ASSET_CONFIG = "acfg"
    ASSET_TRANSFER = "axfer"
    ASSET_FREEZE = "afrz"


# ---- common header ----


@dataclass(frozen=True)
class Header(WireStruct):
    sender: Address = tag("snd", Address)
    fee: int = tag("fee", int)
    first_valid: int = tag("fv", int)
    last_valid: int = tag("lv", int)
    note: bytes = tag("note", bytes)
    genesis_id: str = tag("gen", str)
    genesis_hash: Digest = tag("gh", Digest)

    # Digest of the TxGroup this transaction belongs to (zero when ungrouped).
    group: Digest = tag("grp", Digest)

    # While (sender, lease) is held, no other transaction with the same pair
    # is accepted until last_valid passes.
    lease: Lease = tag("lx", Lease)

    # Non-zero: the sender's spending authority moves to this address.
    rekey_to: Address = tag("rekey", Address)


# ---- variant payloads ----


@dataclass(frozen=True)
class KeyregFields(WireStruct):
    vote_pk: VotePK = tag("votekey", VotePK)
    selection_pk: VRFPK = tag("selkey", VRFPK)
    vote_first: int = tag("votefst", int)
    vote_last: int = tag("votelst", int)
    vote_key_dilution: int = tag("votekd", int)


@dataclass(frozen=True)
class PaymentFields(WireStruct):
    receiver: Address = tag("rcv", Address)
    amount: int = tag("amt", int)
    # Non-zero closes the sender account, sending the remainder here.
    close_remainder_to: Address = tag("close", Address)


@dataclass(frozen=True)
class AssetParams(WireStruct):
    total: int = tag("t", int)
    decimals: int = tag("dc", int)
    default_frozen: bool = tag("df", bool)
    unit_name: str = tag("un", str)
    asset_name: str = tag("an", str)
    url: str = tag("au", str)
    metadata_hash: Digest = tag("am", Digest)
    manager: Address = tag("m", Address)
    reserve: Address = tag("r", Address)
    freeze: Address = tag("f", Address)
    clawback: Address = tag("c", Address)


@dataclass(frozen=True)
class AssetConfigFields(WireStruct):
    # 0 creates a new asset.
    config_asset: int = tag("caid", int)
    # All-zero params destroy `config_asset`.
    asset_params: AssetParams = tag("apar", AssetParams)


@dataclass(frozen=True)
class AssetTransferFields(WireStruct):
    xfer_asset: int = tag("xaid", int)
    asset_amount: int = tag("aamt", int)
    # Non-zero: clawback transfer out of this account.
    asset_sender: Address = tag("asnd", Address)
    asset_receiver: Address = tag("arcv", Address)
    asset_close_to: Address = tag("aclose", Address)


@dataclass(frozen=True)
class AssetFreezeFields(WireStruct):
    freeze_account: Address = tag("fadd", Address)
    freeze_asset: int = tag("faid", int)
    asset_frozen: bool = tag("afrz", bool)


TxPayload = Union[
    PaymentFields,
    KeyregFields,
    AssetConfigFields,
    AssetTransferFields,
    AssetFreezeFields,
]

PAYLOAD_TYPES: Dict[TxType, Type[WireStruct]] = {
    TxType.PAYMENT: PaymentFields,
    TxType.KEYREG: KeyregFields,
    TxType.ASSET_CONFIG: AssetConfigFields,
    TxType.ASSET_TRANSFER: AssetTransferFields,
    TxType.ASSET_FREEZE: AssetFreezeFields,
}

# Flat attribute name → the struct declaring it; backs read access to any field.
_FLAT_OWNER: Dict[str, Type[WireStruct]] = {
    f.name: owner
    for owner in (Header, *PAYLOAD_TYPES.values())
    for f in fields(owner)
}


def _check_tag_table() -> None:
    seen: Dict[str, str] = {"type": "Transaction"}
    for owner in (Header, *PAYLOAD_TYPES.values()):
        for t in wire_fields(owner):
            if t in seen:  # pragma: no cover - import-time guard
                raise RuntimeError(f"wire tag {t!r} declared by {seen[t]} and {owner.__name__}")
            seen[t] = owner.__name__


_check_tag_table()


# ---- transaction ----


@dataclass(frozen=True)
class Transaction:
    """
    One transaction: discriminator, common header and the payload of its type.

    Every flat field is readable on the transaction itself (`tx.amount`,
    `tx.sender`, `tx.vote_pk`, ...). A field belonging to another variant
    reads as its zero value.
    """

    type: TxType
    header: Header = field(default_factory=Header)
    payload: Optional[TxPayload] = None

    def __post_init__(self) -> None:
        kind = TxType(self.type)
        object.__setattr__(self, "type", kind)
        if self.payload is None:
            object.__setattr__(self, "payload", PAYLOAD_TYPES[kind]())
        elif not isinstance(self.payload, PAYLOAD_TYPES[kind]):
            raise TypeError(
                f"{kind.value} transaction needs {PAYLOAD_TYPES[kind].__name__}, "
                f"got {type(self.payload).__name__}"
            )

    def __getattr__(self, name: str) -> Any:
        owner = _FLAT_OWNER.get(name)
        if owner is None:
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")
        if owner is Header:
            return getattr(self.header, name)
        if isinstance(self.payload, owner):
            return getattr(self.payload, name)
        return zero_of(next(f for f in fields(owner) if f.name == name))

    # -- canonical object (flat tag table) --

    def to_obj(self) -> Dict[str, Any]:
        obj: Dict[str, Any] = {"type": self.type.value}
        obj.update(self.header.to_obj())
        obj.update(self.payload.to_obj())  # type: ignore[union-attr]
        return obj

    @classmethod
    def from_obj(cls, o: Mapping[str, Any]) -> "Transaction":
        if not isinstance(o, Mapping):
            raise DeserializationError("transaction must be a map")
        raw_type = o.get("type")
        try:
            kind = TxType(raw_type)
        except ValueError:
            raise DeserializationError(
                "missing or unknown transaction type", type=str(raw_type)
            ) from None

        payload_cls = PAYLOAD_TYPES[kind]
        header_tags = wire_fields(Header)
        payload_tags = wire_fields(payload_cls)
        stray = sorted(
            str(k) for k in o if k != "type" and k not in header_tags and k not in payload_tags
        )
        if stray:
            # The typed model has nowhere to keep them; dropping would change the id.
            raise DeserializationError(
                "fields not carried by this transaction type", type=kind.value, tags=stray
            )

        header = Header.from_obj({k: v for k, v in o.items() if k in header_tags})
        payload = payload_cls.from_obj({k: v for k, v in o.items() if k in payload_tags})
        return cls(type=kind, header=header, payload=payload)  # type: ignore[arg-type]

    def to_msgpack(self) -> bytes:
        return dumps(self)

    @classmethod
    def from_msgpack(cls, data: bytes, *, strict: bool = True) -> "Transaction":
        return cls.from_obj(loads(data, strict=strict))

    def to_base64(self) -> str:
        return b64encode(self.to_msgpack())

    @classmethod
    def from_base64(cls, text: Union[str, bytes], *, strict: bool = True) -> "Transaction":
        try:
            data = b64decode(text)
        except ValueError as e:
            raise DeserializationError(str(e)) from e
        return cls.from_msgpack(data, strict=strict)

    # -- identifier --

    def signable_bytes(self) -> bytes:
        """`b"TX"` followed by the canonical encoding; what gets signed and hashed."""
        return _signable_bytes(HashID.TRANSACTION, self)

    def raw_id(self) -> Digest:
        return Digest(hash_obj(HashID.TRANSACTION, self))

    def txid(self) -> str:
        return b32encode_nopad(self.raw_id())

    def id(self) -> str:
        return self.txid()

    # -- group linkage --

    def with_group(self, group: Union[Digest, bytes]) -> "Transaction":
        return replace(self, header=replace(self.header, group=Digest.coerce(group)))

    def without_group(self) -> "Transaction":
        if self.header.group.is_zero():
            return self
        return self.with_group(Digest.zero())

    # -- structural checks (never run on the id path) --

    def range_problems(self) -> List[str]:
        return self.header.range_problems() + self.payload.range_problems()  # type: ignore[union-attr]

    def problems(self) -> List[str]:
        out = [f"{t} does not fit in uint64" for t in self.range_problems()]
        if self.header.last_valid < self.header.first_valid:
            out.append(
                f"last valid round {self.header.last_valid} is before "
                f"first valid round {self.header.first_valid}"
            )
        return out

    def well_formed(self) -> bool:
        return not self.problems()

    def check_well_formed(self) -> None:
        problems = self.problems()
        if problems:
            raise TxInvalid("malformed transaction", type=self.type.value, problems=problems)

    # -- builders --

    @classmethod
    def payment(
        cls,
        *,
        receiver: Union[Address, bytes],
        amount: int,
        close_remainder_to: Union[Address, bytes, None] = None,
        **header: Any,
    ) -> "Transaction":
        return cls(
            type=TxType.PAYMENT,
            header=Header(**header),
            payload=PaymentFields(
                receiver=receiver, amount=amount, close_remainder_to=close_remainder_to
            ),
        )

    @classmethod
    def keyreg(
        cls,
        *,
        vote_pk: Union[VotePK, bytes, None] = None,
        selection_pk: Union[VRFPK, bytes, None] = None,
        vote_first: int = 0,
        vote_last: int = 0,
        vote_key_dilution: int = 0,
        **header: Any,
    ) -> "Transaction":
        return cls(
            type=TxType.KEYREG,
            header=Header(**header),
            payload=KeyregFields(
                vote_pk=vote_pk,
                selection_pk=selection_pk,
                vote_first=vote_first,
                vote_last=vote_last,
                vote_key_dilution=vote_key_dilution,
            ),
        )

    @classmethod
    def asset_config(
        cls,
        *,
        config_asset: int = 0,
        asset_params: Optional[AssetParams] = None,
        **header: Any,
    ) -> "Transaction":
        return cls(
            type=TxType.ASSET_CONFIG,
            header=Header(**header),
            payload=AssetConfigFields(config_asset=config_asset, asset_params=asset_params),
        )

    @classmethod
    def asset_transfer(
        cls,
        *,
        xfer_asset: int,
        asset_amount: int = 0,
        asset_receiver: Union[Address, bytes, None] = None,
        asset_sender: Union[Address, bytes, None] = None,
        asset_close_to: Union[Address, bytes, None] = None,
        **header: Any,
    ) -> "Transaction":
        return cls(
            type=TxType.ASSET_TRANSFER,
            header=Header(**header),
            payload=AssetTransferFields(
                xfer_asset=xfer_asset,
                asset_amount=asset_amount,
                asset_sender=asset_sender,
                asset_receiver=asset_receiver,
                asset_close_to=asset_close_to,
            ),
        )

    @classmethod
    def asset_freeze(
        cls,
        *,
        freeze_account: Union[Address, bytes],
        freeze_asset: int,
        asset_frozen: bool,
        **header: Any,
    ) -> "Transaction":
        return cls(
            type=TxType.ASSET_FREEZE,
            header=Header(**header),
            payload=AssetFreezeFields(
                freeze_account=freeze_account,
                freeze_asset=freeze_asset,
                asset_frozen=asset_frozen,
            ),
        )

    # -- human helpers --

    def __str__(self) -> str:
        h = self.header
        return f"Tx<{self.type.value} {self.txid()[:10]}… fv={h.first_valid} lv={h.last_valid}>"

    def summary(self) -> Dict[str, Any]:
        """JSON-safe view: id, type and the non-zero fields by attribute name."""
        out: Dict[str, Any] = {"txid": self.txid(), "type": self.type.value}
        for struct in (self.header, self.payload):
            for f in fields(struct):  # type: ignore[arg-type]
                value = getattr(struct, f.name)
                if not is_zero(value):
                    out[f.name] = _jsonable(value)
        return out


def _jsonable(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return to_hex(value)
    if isinstance(value, WireStruct):
        return {f.name: _jsonable(getattr(value, f.name)) for f in fields(value) if not is_zero(getattr(value, f.name))}  # type: ignore[arg-type]
    if isinstance(value, tuple):
        return [_jsonable(v) for v in value]
    return value


# ---- identifier functions ----


def signable_bytes(tx: Transaction) -> bytes:
    return tx.signable_bytes()


def transaction_id(tx: Transaction) -> Digest:
    """Raw 32-byte identifier."""
    return tx.raw_id()


def display_id(tx: Transaction) -> str:
    """Unpadded base32 identifier, e.g. for explorers and logs."""
    return tx.txid()


def parse_display_id(text: str) -> Digest:
    """Inverse of `display_id`: the 32 raw identifier bytes."""
    try:
        raw = b32decode_nopad(text)
    except (TypeError, ValueError) as e:
        raise DeserializationError("invalid transaction id text", text=str(text)[:64]).with_cause(e)
    if len(raw) != TXID_LEN:
        raise DeserializationError("transaction id must decode to 32 bytes", length=len(raw))
    return Digest(raw)


def verify_id(tx: Transaction, expected: Union[str, bytes]) -> None:
    """Raise HashMismatch unless `tx` has identifier `expected` (text or raw)."""
    raw = parse_display_id(expected) if isinstance(expected, str) else bytes(expected)
    got = tx.raw_id()
    if got != raw:
        raise HashMismatch(
            expected=b32encode_nopad(raw), got=b32encode_nopad(got), subject="transaction"
        )


__all__ = [
    "TXID_LEN",
    "TXID_TEXT_LEN",
    "TxType",
    "Header",
    "KeyregFields",
    "PaymentFields",
    "AssetParams",
    "AssetConfigFields",
    "AssetTransferFields",
    "AssetFreezeFields",
    "TxPayload",
    "PAYLOAD_TYPES",
    "Transaction",
    "signable_bytes",
    "transaction_id",
    "display_id",
    "parse_display_id",
    "verify_id",
]
