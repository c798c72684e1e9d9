# SPDX-License-Identifier: Apache-2.0
"""
Transaction model tests

- Builders for every variant and the flat field view.
- Wire decode of every variant (tag table), including strictness.
- Structural checks (well_formed / check_well_formed).
- Group linkage helpers return new values.
"""
from __future__ import annotations

import dataclasses

import msgspec
import pytest

from tests.conftest import GENESIS_HASH, RECEIVER, SENDER, make_payment
from txcore.encoding.msgpack import dumps
from txcore.errors import DeserializationError, TxInvalid
from txcore.types.primitives import Address, Digest
from txcore.types.tx import (
    AssetParams,
    Header,
    KeyregFields,
    PaymentFields,
    Transaction,
    TxType,
)
from txcore.types.wire import out_of_range

MANAGER = b"\x0a" * 32


def _all_variants():
    common = dict(sender=SENDER, fee=1000, first_valid=1, last_valid=10, genesis_hash=GENESIS_HASH)
    return [
        Transaction.payment(receiver=RECEIVER, amount=7, **common),
        Transaction.keyreg(
            vote_pk=b"\x05" * 32,
            selection_pk=b"\x06" * 32,
            vote_first=1,
            vote_last=100,
            vote_key_dilution=10,
            **common,
        ),
        Transaction.asset_config(
            asset_params=AssetParams(
                total=1_000_000,
                decimals=2,
                unit_name="TOK",
                asset_name="Token",
                url="https://example.org/token",
                metadata_hash=b"\x07" * 32,
                manager=MANAGER,
            ),
            **common,
        ),
        Transaction.asset_transfer(xfer_asset=42, asset_amount=5, asset_receiver=RECEIVER, **common),
        Transaction.asset_freeze(freeze_account=RECEIVER, freeze_asset=42, asset_frozen=True, **common),
    ]


def test_builders_set_type_and_payload():
    kinds = [tx.type for tx in _all_variants()]
    assert kinds == [
        TxType.PAYMENT,
        TxType.KEYREG,
        TxType.ASSET_CONFIG,
        TxType.ASSET_TRANSFER,
        TxType.ASSET_FREEZE,
    ]


def test_type_accepts_wire_string():
    tx = Transaction(type="pay", payload=PaymentFields(amount=1))
    assert tx.type is TxType.PAYMENT


def test_payload_defaults_to_variant_zero():
    tx = Transaction(type=TxType.KEYREG)
    assert tx.payload == KeyregFields()
    assert tx.to_obj()["type"] == "keyreg"


def test_mismatched_payload_rejected():
    with pytest.raises(TypeError):
        Transaction(type=TxType.KEYREG, payload=PaymentFields(amount=1))


def test_flat_field_view(payment):
    assert payment.amount == 1_000_000
    assert payment.sender == SENDER
    assert isinstance(payment.sender, Address)
    assert payment.fee == 1000
    # other variants' fields read as zero
    assert payment.vote_first == 0
    assert payment.asset_frozen is False
    assert payment.asset_params == AssetParams()
    with pytest.raises(AttributeError):
        payment.no_such_field


def test_values_are_frozen(payment):
    with pytest.raises(dataclasses.FrozenInstanceError):
        payment.type = TxType.KEYREG  # type: ignore[misc]
    with pytest.raises(dataclasses.FrozenInstanceError):
        payment.header.fee = 1  # type: ignore[misc]


def test_zero_amount_is_omitted():
    tx = make_payment(amount=0)
    assert b"amt" not in tx.to_msgpack()
    no_amount = Transaction(
        type=TxType.PAYMENT,
        header=Header(
            sender=SENDER, fee=1000, first_valid=100, last_valid=1000, genesis_hash=GENESIS_HASH
        ),
        payload=PaymentFields(receiver=RECEIVER),
    )
    assert tx.to_msgpack() == no_amount.to_msgpack()
    assert tx.txid() == no_amount.txid()


def test_empty_note_and_zero_lease_omitted():
    tx = make_payment(note=b"", lease=b"\x00" * 32)
    assert tx.to_msgpack() == make_payment().to_msgpack()
    obj = msgspec.msgpack.decode(tx.to_msgpack())
    assert "note" not in obj
    assert "lx" not in obj


def test_bool_in_integer_field_encodes_as_integer():
    tx = make_payment(fee=True)
    assert type(tx.fee) is int and tx.fee == 1
    assert b"\xa3fee\x01" in tx.to_msgpack()
    assert tx.problems() == []
    assert Transaction.from_msgpack(tx.to_msgpack()) == tx
    assert out_of_range(int, True)


def test_non_integer_in_integer_field_rejected():
    with pytest.raises(TypeError):
        make_payment(fee=1.5)


def test_all_zero_asset_params_omitted():
    tx = Transaction.asset_config(config_asset=9, sender=SENDER)
    obj = msgspec.msgpack.decode(tx.to_msgpack())
    assert "apar" not in obj
    assert obj["caid"] == 9


def test_asset_params_nested_tags():
    tx = _all_variants()[2]
    obj = msgspec.msgpack.decode(tx.to_msgpack())
    assert list(obj["apar"]) == ["am", "an", "au", "dc", "m", "t", "un"]
    assert obj["apar"]["t"] == 1_000_000


@pytest.mark.parametrize("tx", _all_variants(), ids=lambda tx: tx.type.value)
def test_wire_decode_every_variant(tx):
    data = tx.to_msgpack()
    back = Transaction.from_msgpack(data)
    assert back == tx
    assert back.to_msgpack() == data
    assert back.txid() == tx.txid()
    assert Transaction.from_base64(tx.to_base64()) == tx


def test_decode_rejects_missing_type():
    data = dumps({"snd": SENDER, "fee": 1})
    with pytest.raises(DeserializationError):
        Transaction.from_msgpack(data)


def test_decode_rejects_unknown_type():
    with pytest.raises(DeserializationError):
        Transaction.from_obj({"type": "appl", "fee": 1})


def test_decode_rejects_other_variant_fields():
    obj = make_payment().to_obj()
    obj["votefst"] = 5
    with pytest.raises(DeserializationError) as ei:
        Transaction.from_obj(obj)
    assert ei.value.data["tags"] == ["votefst"]


def test_decode_rejects_unknown_tags():
    with pytest.raises(DeserializationError):
        Transaction.from_obj({"type": "pay", "zzz": 1})


@pytest.mark.parametrize(
    "tag,value",
    [
        ("amt", -1),
        ("amt", "1"),
        ("snd", b"\x01" * 31),
        ("gen", b"bytes"),
        ("note", "text"),
    ],
)
def test_decode_rejects_bad_value_types(tag, value):
    with pytest.raises(DeserializationError):
        Transaction.from_obj({"type": "pay", tag: value})


def test_decode_rejects_non_canonical_bytes(payment):
    obj = msgspec.msgpack.decode(payment.to_msgpack())
    reordered = dict(reversed(list(obj.items())))
    raw = msgspec.msgpack.encode(reordered)
    with pytest.raises(DeserializationError):
        Transaction.from_msgpack(raw)
    assert Transaction.from_msgpack(raw, strict=False) == payment


def test_from_base64_rejects_bad_text():
    with pytest.raises(DeserializationError):
        Transaction.from_base64("%%%")


def test_with_and_without_group(payment):
    gid = Digest(b"\x09" * 32)
    grouped = payment.with_group(gid)
    assert grouped.group == gid
    assert payment.group.is_zero()
    assert grouped.without_group() == payment
    assert payment.without_group() is payment


def test_well_formed(payment):
    assert payment.well_formed()
    payment.check_well_formed()


def test_last_valid_before_first_valid_is_invalid():
    tx = make_payment(first_valid=10, last_valid=9)
    with pytest.raises(TxInvalid) as ei:
        tx.check_well_formed()
    assert "before first valid" in ei.value.data["problems"][0]


def test_out_of_range_integers_are_invalid():
    tx = make_payment(amount=1 << 64)
    assert tx.problems() == ["amt does not fit in uint64"]
    neg = Transaction.asset_config(asset_params=AssetParams(total=-1))
    assert neg.range_problems() == ["apar"]


def test_construction_is_total_for_inconsistent_fields():
    # a payment without receiver or amount is still a value with an id
    tx = Transaction(type=TxType.PAYMENT, header=Header(sender=SENDER))
    assert tx.to_obj()["type"] == "pay"
    assert len(tx.txid()) == 52


def test_summary(payment):
    s = payment.summary()
    assert s["type"] == "pay"
    assert s["txid"] == payment.txid()
    assert s["amount"] == 1_000_000
    assert s["sender"] == "0x" + SENDER.hex()
    assert "note" not in s
    assert str(payment).startswith("Tx<pay ")
