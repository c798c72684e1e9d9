"""
txcore.utils
------------

Utility toolkit (pure-stdlib apart from the optional hash backend).

Submodules are loaded lazily so importing `txcore.utils` is cheap:

    from txcore import utils
    h = utils.hash.sha512_256(b"hello")
    s = utils.bytes.b32encode_nopad(h)

- `bytes` : hex / base32 / base64 helpers, length guards
- `hash`  : SHA-512/256

Names like `bytes` and `hash` shadow Python builtins if imported directly;
prefer module-qualified access or the aliases `bytes_utils` / `hash_utils`.
"""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any, Dict, Iterable, List

__all__: List[str] = ["bytes", "hash", "bytes_utils", "hash_utils"]

_SUBMODS: Dict[str, str] = {
    "bytes": "txcore.utils.bytes",
    "hash": "txcore.utils.hash",
}

_ALIASES: Dict[str, str] = {
    "bytes_utils": "bytes",
    "hash_utils": "hash",
}

if TYPE_CHECKING:  # pragma: no cover
    from . import bytes as bytes  # type: ignore
    from . import hash as hash  # type: ignore


def __getattr__(name: str) -> Any:
    canonical = _ALIASES.get(name, name)
    if canonical in _SUBMODS:
        mod = import_module(_SUBMODS[canonical])
        globals()[canonical] = mod
        if name != canonical:
            globals()[name] = mod
        return mod
    raise AttributeError(f"module 'txcore.utils' has no attribute '{name}'")


def __dir__() -> Iterable[str]:  # pragma: no cover
    return sorted(set(list(globals().keys()) + list(__all__)))
