"""
txcore
======

Deterministic transaction substrate: the transaction model, its canonical
MessagePack encoding, domain-separated identifiers and atomic-group linkage.
Signing, consensus and transport layers build on top.

Only re-exports the version here to keep import-time side effects near zero.
"""

from __future__ import annotations

from .version import __version__


def get_version() -> str:
    """Return the version string for this package."""
    return __version__


__all__ = ["__version__", "get_version"]
