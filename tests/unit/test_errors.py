# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

import json

import pytest

from txcore.errors import (
    ConfigError,
    CoreErrorCode,
    DependencyMissing,
    DeserializationError,
    HashMismatch,
    InternalError,
    SerializationError,
    Severity,
    TxCoreError,
    ensure_txcore_error,
    wrap,
)


def test_subclasses_carry_codes():
    assert DeserializationError().code is CoreErrorCode.DESERIALIZATION
    assert SerializationError().code is CoreErrorCode.SERIALIZATION
    assert ConfigError().code is CoreErrorCode.CONFIG
    assert DependencyMissing("pycryptodome").data == {"package": "pycryptodome", "hint": ""}
    assert HashMismatch(expected="A", got="B").data["subject"] == "transaction"


def test_to_dict_is_json_safe():
    err = DeserializationError("bad field", field="snd", raw=b"\x01\x02", tags=("a", "b"))
    d = err.to_dict()
    json.dumps(d)
    assert d["code"] == "TXCORE/DESERIALIZATION"
    assert d["data"] == {"field": "snd", "raw": "0102", "tags": ["a", "b"]}
    assert d["severity"] == int(Severity.ERROR)
    assert d["retryable"] is False


def test_with_context_keeps_subclass_and_does_not_mutate():
    err = DeserializationError("bad", a=1)
    enriched = err.with_context(path="x.msgpack")
    assert isinstance(enriched, DeserializationError)
    assert enriched.data == {"a": 1, "path": "x.msgpack"}
    assert err.data == {"a": 1}


def test_with_cause_links_exception():
    cause = ValueError("boom")
    err = SerializationError("encode failed").with_cause(cause)
    assert isinstance(err, SerializationError)
    assert err.__cause__ is cause
    assert err.to_dict(include_cause=True)["cause"] == {"type": "ValueError", "message": "boom"}


def test_wrap_and_ensure():
    w = wrap(OSError("disk"), path="/tmp/x")
    assert isinstance(w, InternalError)
    assert w.data["path"] == "/tmp/x"
    assert isinstance(w.cause, OSError)

    existing = ConfigError("x")
    assert wrap(existing, k=1).data == {"k": 1}

    e = ensure_txcore_error(RuntimeError("r"))
    assert isinstance(e, InternalError)
    assert ensure_txcore_error(existing) is existing


def test_errors_are_raisable():
    with pytest.raises(TxCoreError) as ei:
        raise HashMismatch(expected="A", got="B", subject="group")
    assert "TXCORE/HASH_MISMATCH" in str(ei.value)
