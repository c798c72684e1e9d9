# SPDX-License-Identifier: Apache-2.0
"""
Canonical MessagePack tests

Goals:
- Encoding is deterministic and independent of map construction order.
- Zero values are omitted from maps (but kept inside lists).
- Strict decoding rejects anything that is not already canonical.
- Unsupported types fail with SerializationError.
"""
from __future__ import annotations

import msgspec
import pytest

from txcore.encoding.canonical import HashID, hash_obj, signable_bytes
from txcore.encoding.msgpack import canonicalize, dumps, is_zero, loads
from txcore.errors import DeserializationError, SerializationError
from txcore.types.primitives import Address, Digest
from txcore.utils.hash import sha512_256


def test_map_keys_sorted_by_utf8_bytes():
    a = dumps({"b": 1, "a": 2, "aa": 3, "B": 4})
    b = dumps({"aa": 3, "B": 4, "a": 2, "b": 1})
    assert a == b
    assert list(msgspec.msgpack.decode(a)) == ["B", "a", "aa", "b"]


def test_zero_values_are_omitted():
    obj = {
        "none": None,
        "false": False,
        "zero": 0,
        "empty_str": "",
        "empty_bytes": b"",
        "empty_list": [],
        "empty_map": {},
        "zero_addr": Address.zero(),
        "nested_zero": {"x": 0, "y": {"z": b""}},
        "keep": 1,
    }
    assert canonicalize(obj) == {"keep": 1}
    assert dumps(obj) == dumps({"keep": 1})


def test_variable_bytes_of_zeros_are_not_zero():
    # Only fixed-size values collapse when all-zero.
    assert not is_zero(b"\x00" * 32)
    assert is_zero(Digest(b"\x00" * 32))
    assert canonicalize({"note": b"\x00"}) == {"note": b"\x00"}


def test_list_elements_are_kept():
    assert canonicalize([0, None, "", {"a": 0}]) == [0, None, "", {}]


def test_shortest_integer_forms():
    assert dumps(1) == b"\x01"
    assert dumps(1000) == b"\xcd\x03\xe8"
    assert dumps(1_000_000) == b"\xce\x00\x0f\x42\x40"
    assert dumps((1 << 64) - 1) == b"\xcf" + b"\xff" * 8


def test_bytes_and_text_families():
    assert dumps(b"ab") == b"\xc4\x02ab"
    assert dumps("ab") == b"\xa2ab"


def test_loads_round_trip_canonical():
    data = dumps({"snd": b"\x01" * 32, "amt": 5, "type": "pay"})
    assert loads(data) == {"amt": 5, "snd": b"\x01" * 32, "type": "pay"}


def test_strict_loads_rejects_unsorted_keys():
    raw = msgspec.msgpack.encode({"b": 1, "a": 2})  # insertion order kept
    with pytest.raises(DeserializationError):
        loads(raw)
    assert loads(raw, strict=False) == {"a": 2, "b": 1}


def test_strict_loads_rejects_explicit_zero():
    raw = msgspec.msgpack.encode({"a": 0})
    with pytest.raises(DeserializationError):
        loads(raw)


def test_strict_loads_rejects_long_integer_form():
    # 1 written as uint16
    with pytest.raises(DeserializationError):
        loads(b"\x81\xa1a\xcd\x00\x01")


def test_loads_rejects_garbage():
    with pytest.raises(DeserializationError):
        loads(b"\xc1")


@pytest.mark.parametrize("value", [1.5, {1, 2}, object()])
def test_unsupported_types(value):
    with pytest.raises(SerializationError):
        dumps({"x": value})


def test_non_str_keys_rejected():
    with pytest.raises(SerializationError):
        dumps({1: "a"})


def test_out_of_range_integer_is_serialization_error():
    with pytest.raises(SerializationError):
        dumps({"x": 1 << 64})


def test_domain_separation():
    obj = {"a": 1}
    assert signable_bytes(HashID.TRANSACTION, obj) == b"TX" + dumps(obj)
    assert signable_bytes("TG", obj) == b"TG" + dumps(obj)
    assert hash_obj(HashID.TRANSACTION, obj) != hash_obj(HashID.TX_GROUP, obj)
    assert hash_obj("TX", obj) == sha512_256(b"TX" + dumps(obj))


def test_unknown_domain_tag_rejected():
    with pytest.raises(ValueError):
        signable_bytes("XX", {"a": 1})
