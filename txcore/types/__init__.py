"""
txcore.types
============

Typed model of the transaction layer:

- primitives: fixed-size byte values (Address, Digest, Signature, ...)
- tx:         Transaction (pay/keyreg/acfg/axfer/afrz), identifier helpers
- group:      TxGroup and group-id assignment
- signed:     SignedTxn envelope (sig / msig / lsig)

The encoder imports `primitives` while `tx` imports the encoder, so this
module exposes **lazy re-exports**: attributes resolve on first access.

Example
-------
>>> from txcore.types import Transaction, TxGroup
>>> from txcore.types import tx, group  # submodules available lazily too
"""

from __future__ import annotations

import importlib
from typing import TYPE_CHECKING

__all__ = [
    # submodules
    "primitives",
    "tx",
    "group",
    "signed",
    # symbols
    "Address",
    "Digest",
    "Signature",
    "TxType",
    "Header",
    "AssetParams",
    "Transaction",
    "TxGroup",
    "SignedTxn",
    "MultisigSig",
    "LogicSig",
    "transaction_id",
    "display_id",
    "parse_display_id",
    "verify_id",
    "compute_group_id",
    "assign_group_id",
]

# txcore.types.<submodule>
_SUBMODULES = {
    "primitives": "txcore.types.primitives",
    "tx": "txcore.types.tx",
    "group": "txcore.types.group",
    "signed": "txcore.types.signed",
}

# txcore.types.<Name> -> (module, attribute)
_SYMBOLS = {
    "Address": ("txcore.types.primitives", "Address"),
    "Digest": ("txcore.types.primitives", "Digest"),
    "Signature": ("txcore.types.primitives", "Signature"),
    "TxType": ("txcore.types.tx", "TxType"),
    "Header": ("txcore.types.tx", "Header"),
    "AssetParams": ("txcore.types.tx", "AssetParams"),
    "Transaction": ("txcore.types.tx", "Transaction"),
    "transaction_id": ("txcore.types.tx", "transaction_id"),
    "display_id": ("txcore.types.tx", "display_id"),
    "parse_display_id": ("txcore.types.tx", "parse_display_id"),
    "verify_id": ("txcore.types.tx", "verify_id"),
    "TxGroup": ("txcore.types.group", "TxGroup"),
    "compute_group_id": ("txcore.types.group", "compute_group_id"),
    "assign_group_id": ("txcore.types.group", "assign_group_id"),
    "SignedTxn": ("txcore.types.signed", "SignedTxn"),
    "MultisigSig": ("txcore.types.signed", "MultisigSig"),
    "LogicSig": ("txcore.types.signed", "LogicSig"),
}


def __getattr__(name: str):
    if name in _SUBMODULES:
        return importlib.import_module(_SUBMODULES[name])
    target = _SYMBOLS.get(name)
    if target:
        mod = importlib.import_module(target[0])
        return getattr(mod, target[1])
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__():
    base = set(globals().keys())
    return sorted(base | set(_SUBMODULES.keys()) | set(_SYMBOLS.keys()))


# Static analysis only.
if TYPE_CHECKING:
    from .group import TxGroup, assign_group_id, compute_group_id  # noqa: F401
    from .primitives import Address, Digest, Signature  # noqa: F401
    from .signed import LogicSig, MultisigSig, SignedTxn  # noqa: F401
    from .tx import (  # noqa: F401
        AssetParams,
        Header,
        Transaction,
        TxType,
        display_id,
        parse_display_id,
        transaction_id,
        verify_id,
    )
