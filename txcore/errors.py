"""
txcore.errors
-------------

Every failure the package reports is a `TxCoreError`:

    TxCoreError(code, message, data={...})
    ├── InternalError          unexpected failure, usually wrapping a foreign exception
    ├── DependencyMissing      no usable backend for a required primitive
    ├── ConfigError            bad config file / env / override value
    ├── SerializationError     value cannot be canonically encoded
    ├── DeserializationError   bytes or text that are not a valid, canonical value
    ├── HashMismatch           an identifier did not match the expected one
    └── TxInvalid              failed structural check (check_well_formed)
        └── GroupInvalid       group assembly limits (empty, too large)

`code` is a stable string (see `CoreErrorCode`) and `data` is JSON-safe, so
`to_dict()` can go straight into a log line or CLI output.

Deriving an identifier never raises; these errors come from decoding,
configuration, explicit structural checks and group assembly.

Stdlib only, so every other module can import it first.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum, IntEnum
from typing import Any, Dict, Mapping, Optional, Type, TypeVar

E = TypeVar("E", bound="TxCoreError")


class Severity(IntEnum):
    INFO = 20
    WARNING = 30
    ERROR = 40
    CRITICAL = 50


class CoreErrorCode(str, Enum):
    INTERNAL = "TXCORE/INTERNAL"
    DEP_MISSING = "TXCORE/DEPENDENCY_MISSING"
    CONFIG = "TXCORE/CONFIG"
    SERIALIZATION = "TXCORE/SERIALIZATION"
    DESERIALIZATION = "TXCORE/DESERIALIZATION"
    HASH_MISMATCH = "TXCORE/HASH_MISMATCH"
    TX_INVALID = "TXCORE/TX_INVALID"
    GROUP_INVALID = "TXCORE/GROUP_INVALID"


@dataclass(eq=False)
class TxCoreError(Exception):
    """
    Root of the error tree.

    `retryable` is False for everything raised here: decoding and validation
    give the same answer on a second try. `cause` is the wrapped exception,
    if any, and also becomes `__cause__`.
    """

    code: str
    message: str
    data: Dict[str, Any] = field(default_factory=dict)
    severity: Severity = Severity.ERROR
    retryable: bool = False
    cause: Optional[BaseException] = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        Exception.__init__(self, self._headline())

    def _headline(self) -> str:
        return f"{_code_str(self.code)}: {self.message}"

    def with_context(self: E, **ctx: Any) -> E:
        """Copy with `ctx` merged into `data`; the original is left alone."""
        return self._copy(data={**self.data, **_jsonmap(ctx)})

    def with_cause(self: E, exc: BaseException) -> E:
        new = self._copy(cause=exc)
        new.__cause__ = exc
        return new

    def _copy(self: E, **changes: Any) -> E:
        # Subclass __init__ signatures differ, so bypass them.
        cls = type(self)
        new = cls.__new__(cls)
        for f in fields(TxCoreError):
            setattr(new, f.name, changes.get(f.name, getattr(self, f.name)))
        Exception.__init__(new, new._headline())
        return new

    def to_dict(self, include_cause: bool = False) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "code": _code_str(self.code),
            "message": self.message,
            "data": _jsonable(self.data),
            "severity": int(self.severity),
            "retryable": self.retryable,
        }
        if include_cause and self.cause is not None:
            out["cause"] = {"type": type(self.cause).__name__, "message": str(self.cause)}
        return out

    def __str__(self) -> str:
        if not self.data:
            return self._headline()
        details = ", ".join(f"{k}={_short(v)}" for k, v in self.data.items())
        return f"{self._headline()} [{details}]"


def _simple(code: CoreErrorCode, default_message: str) -> Any:
    def __init__(self: TxCoreError, message: str = default_message, **data: Any) -> None:
        TxCoreError.__init__(self, code=code, message=message, data=_jsonmap(data))

    return __init__


class InternalError(TxCoreError):
    __init__ = _simple(CoreErrorCode.INTERNAL, "internal error")


class ConfigError(TxCoreError):
    __init__ = _simple(CoreErrorCode.CONFIG, "invalid configuration")


class SerializationError(TxCoreError):
    __init__ = _simple(CoreErrorCode.SERIALIZATION, "serialization failed")


class DeserializationError(TxCoreError):
    __init__ = _simple(CoreErrorCode.DESERIALIZATION, "deserialization failed")


class TxInvalid(TxCoreError):
    __init__ = _simple(CoreErrorCode.TX_INVALID, "invalid transaction")


class GroupInvalid(TxInvalid):
    __init__ = _simple(CoreErrorCode.GROUP_INVALID, "invalid transaction group")


class DependencyMissing(TxCoreError):
    def __init__(self, package: str, hint: str = "") -> None:
        super().__init__(
            code=CoreErrorCode.DEP_MISSING,
            message=f"missing dependency: {package}" + (f" ({hint})" if hint else ""),
            data={"package": package, "hint": hint},
        )


class HashMismatch(TxCoreError):
    def __init__(self, expected: str, got: str, subject: str = "transaction") -> None:
        super().__init__(
            code=CoreErrorCode.HASH_MISMATCH,
            message=f"id mismatch for {subject}",
            data={"expected": expected, "got": got, "subject": subject},
        )


def wrap(exc: BaseException, *, as_: Type[TxCoreError] = InternalError, **ctx: Any) -> TxCoreError:
    """
    Turn any exception into a TxCoreError carrying `ctx`.
    TxCoreErrors only get the extra context.
    """
    if isinstance(exc, TxCoreError):
        return exc.with_context(**ctx)
    return as_(str(exc) or type(exc).__name__, **ctx).with_cause(exc)  # type: ignore[call-arg]


def ensure_txcore_error(exc: BaseException) -> TxCoreError:
    if isinstance(exc, TxCoreError):
        return exc
    return InternalError().with_cause(exc)


def _code_str(code: Any) -> str:
    return code.value if isinstance(code, Enum) else str(code)


def _jsonmap(data: Mapping[str, Any]) -> Dict[str, Any]:
    return {str(k): _jsonable(v) for k, v in data.items()}


def _jsonable(v: Any) -> Any:
    if v is None or isinstance(v, (bool, int, float, str)):
        return v
    if isinstance(v, (bytes, bytearray, memoryview)):
        return bytes(v).hex()
    if isinstance(v, Mapping):
        return _jsonmap(v)
    if isinstance(v, (list, tuple, set, frozenset)):
        return [_jsonable(x) for x in v]
    return str(v)


def _short(v: Any, limit: int = 96) -> str:
    s = str(v)
    return s if len(s) <= limit else s[:limit] + "…"


__all__ = [
    "Severity",
    "CoreErrorCode",
    "TxCoreError",
    "InternalError",
    "DependencyMissing",
    "ConfigError",
    "SerializationError",
    "DeserializationError",
    "HashMismatch",
    "TxInvalid",
    "GroupInvalid",
    "wrap",
    "ensure_txcore_error",
]
