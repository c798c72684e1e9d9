"""
txcore.types.wire
=================

Explicit mapping between typed dataclass fields and the short wire tags of
the flat MessagePack layout.

Each wire field is declared with `tag(...)`, which records the wire key and
the field's *kind* in the dataclass field metadata:

    @dataclass(frozen=True)
    class PaymentFields(WireStruct):
        receiver: Address = tag("rcv", Address)
        amount: int = tag("amt", int)

Kinds: int (uint64), bool, str, bytes (variable length), a `FixedBytes`
subclass, a nested struct with `from_obj`, or `ListOf(kind)`.

`to_obj()` returns every tag with its current value, zero values included;
dropping zeros and ordering keys is left to the canonical encoder so the rule
lives in one place. `from_obj()` is strict about value types and rejects
tags the struct does not declare.
"""

from __future__ import annotations

import operator
from dataclasses import MISSING, Field, field, fields
from typing import Any, Dict, Mapping, Type, TypeVar

from txcore.errors import DeserializationError
from txcore.types.primitives import FixedBytes

UINT64_MAX = (1 << 64) - 1

S = TypeVar("S", bound="WireStruct")


class ListOf:
    """Kind marker for a homogeneous sequence (encoded as a msgpack array)."""

    __slots__ = ("kind",)

    def __init__(self, kind: Any) -> None:
        self.kind = kind

    def __repr__(self) -> str:
        return f"ListOf({getattr(self.kind, '__name__', self.kind)!s})"


def tag(name: str, kind: Any, *, required: bool = False) -> Any:
    """Declare a dataclass field carried on the wire under `name`."""
    md = {"tag": name, "kind": kind}
    if required:
        return field(metadata=md)
    if isinstance(kind, ListOf):
        return field(default=(), metadata=md)
    if kind is int:
        return field(default=0, metadata=md)
    if kind is bool:
        return field(default=False, metadata=md)
    if kind is str:
        return field(default="", metadata=md)
    if kind is bytes:
        return field(default=b"", metadata=md)
    if isinstance(kind, type) and issubclass(kind, FixedBytes):
        return field(default_factory=kind.zero, metadata=md)
    return field(default_factory=kind, metadata=md)


def wire_fields(cls_or_obj: Any) -> Dict[str, Field]:
    """Wire tag → dataclass Field, in declaration order."""
    return {f.metadata["tag"]: f for f in fields(cls_or_obj) if "tag" in f.metadata}


def zero_of(f: Field) -> Any:
    if f.default is not MISSING:
        return f.default
    if f.default_factory is not MISSING:  # type: ignore[misc]
        return f.default_factory()  # type: ignore[misc]
    return None


# --------------------------------------------------------------------------
# construction-time coercion (lenient) and decode-time checks (strict)
# --------------------------------------------------------------------------


def coerce(kind: Any, value: Any) -> Any:
    if isinstance(kind, ListOf):
        return tuple(coerce(kind.kind, v) for v in (value or ()))
    if isinstance(kind, type) and issubclass(kind, FixedBytes):
        return kind.coerce(value)
    if kind is bytes:
        return b"" if value is None else bytes(value)
    if kind is int:
        # bool is an int subclass but would encode as msgpack true/false.
        return 0 if value is None else int(operator.index(value))
    if kind is bool:
        return bool(value)
    if kind is str:
        return "" if value is None else value
    if value is None:
        return kind()
    if isinstance(value, kind):
        return value
    if isinstance(value, Mapping) and hasattr(kind, "from_obj"):
        return kind.from_obj(value)
    raise TypeError(f"expected {kind.__name__}, got {type(value).__name__}")


def from_wire(kind: Any, value: Any, where: str) -> Any:
    if isinstance(kind, ListOf):
        if not isinstance(value, (list, tuple)):
            raise DeserializationError("expected array", field=where)
        return tuple(from_wire(kind.kind, v, where) for v in value)
    if kind is int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise DeserializationError("expected unsigned integer", field=where)
        if not 0 <= value <= UINT64_MAX:
            raise DeserializationError("integer out of uint64 range", field=where)
        return value
    if kind is bool:
        if not isinstance(value, bool):
            raise DeserializationError("expected boolean", field=where)
        return value
    if kind is str:
        if not isinstance(value, str):
            raise DeserializationError("expected string", field=where)
        return value
    if kind is bytes:
        if not isinstance(value, (bytes, bytearray)):
            raise DeserializationError("expected byte string", field=where)
        return bytes(value)
    if isinstance(kind, type) and issubclass(kind, FixedBytes):
        if not isinstance(value, (bytes, bytearray)) or len(value) != kind.SIZE:
            raise DeserializationError(
                f"expected {kind.SIZE}-byte {kind.__name__}", field=where
            )
        return kind(value)
    if not isinstance(value, Mapping):
        raise DeserializationError("expected map", field=where)
    return kind.from_obj(value)


def out_of_range(kind: Any, value: Any) -> bool:
    """True for integers a uint64 field cannot hold (checked recursively)."""
    if kind is int:
        if isinstance(value, bool) or not isinstance(value, int):
            return True
        return not 0 <= value <= UINT64_MAX
    if isinstance(kind, ListOf):
        return any(out_of_range(kind.kind, v) for v in value)
    if hasattr(value, "range_problems"):
        return bool(value.range_problems())
    return False


class WireStruct:
    """Mixin for frozen dataclasses whose fields are declared with `tag()`."""

    def __post_init__(self) -> None:
        for f in fields(self):  # type: ignore[arg-type]
            kind = f.metadata.get("kind")
            if kind is None:
                continue
            object.__setattr__(self, f.name, coerce(kind, getattr(self, f.name)))

    def to_obj(self) -> Dict[str, Any]:
        return {t: getattr(self, f.name) for t, f in wire_fields(self).items()}

    @classmethod
    def from_obj(cls: Type[S], o: Mapping[str, Any]) -> S:
        if not isinstance(o, Mapping):
            raise DeserializationError("expected map", struct=cls.__name__)
        known = wire_fields(cls)
        unknown = sorted(str(k) for k in o if k not in known)
        if unknown:
            raise DeserializationError(
                "unknown fields", struct=cls.__name__, tags=unknown
            )
        kwargs = {
            f.name: from_wire(f.metadata["kind"], o[t], f"{cls.__name__}.{t}")
            for t, f in known.items()
            if t in o
        }
        return cls(**kwargs)  # type: ignore[call-arg]

    def range_problems(self) -> list:
        """Wire tags whose integer value cannot be encoded as uint64."""
        return [
            t
            for t, f in wire_fields(self).items()
            if out_of_range(f.metadata["kind"], getattr(self, f.name))
        ]


__all__ = [
    "UINT64_MAX",
    "ListOf",
    "tag",
    "wire_fields",
    "zero_of",
    "coerce",
    "from_wire",
    "WireStruct",
]
