# SPDX-License-Identifier: Apache-2.0
"""
Shared pytest fixtures:
- Fixed addresses and genesis hash matching tests/fixtures/golden_vectors.json
- A reference payment transaction and a small builder for variations
- Environment isolation for TXCORE_* variables and the logging context
"""
from __future__ import annotations

import base64
import logging
import typing as t

import pytest

from txcore import logging as tlog
from txcore.types.tx import Transaction

SENDER = bytes(range(1, 33))
RECEIVER = bytes(range(33, 65))
GENESIS_HASH = base64.b64decode("SGO1GKSzyE7IEPItTxCByw9x8FmnrCDexi9/cOUJOiI=")


# ---------- ENV ISOLATION ----------

@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> t.Iterator[None]:
    """Drop TXCORE_* variables from the developer's shell and reset log context."""
    import os

    for key in list(os.environ):
        if key.startswith("TXCORE_"):
            monkeypatch.delenv(key, raising=False)
    tlog.clear_context()
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    tlog.clear_context()
    # CLI tests call configure(); put pytest's handlers back.
    for h in list(root.handlers):
        if h not in handlers:
            root.removeHandler(h)
            h.close()
    for h in handlers:
        if h not in root.handlers:
            root.addHandler(h)
    root.setLevel(level)


# ---------- TRANSACTIONS ----------

@pytest.fixture
def sender() -> bytes:
    return SENDER


@pytest.fixture
def receiver() -> bytes:
    return RECEIVER


@pytest.fixture
def genesis_hash() -> bytes:
    return GENESIS_HASH


def make_payment(amount: int = 1_000_000, **overrides: t.Any) -> Transaction:
    """The golden-vector payment; keyword overrides change single fields."""
    kw: t.Dict[str, t.Any] = dict(
        sender=SENDER,
        receiver=RECEIVER,
        amount=amount,
        fee=1000,
        first_valid=100,
        last_valid=1000,
        genesis_hash=GENESIS_HASH,
    )
    kw.update(overrides)
    return Transaction.payment(**kw)


@pytest.fixture
def payment() -> Transaction:
    return make_payment()


@pytest.fixture
def build_payment() -> t.Callable[..., Transaction]:
    return make_payment
