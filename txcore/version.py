"""
Version helpers for txcore.

Best-effort detection from:
    1) TXCORE_VERSION env var (authoritative override)
    2) installed distribution metadata
    3) fallback DEFAULT_VERSION

This module has **no external dependencies** and is safe to import very early.
"""

from __future__ import annotations

import os
import re
from importlib import metadata
from typing import Optional

DEFAULT_VERSION = "0.1.0"
DIST_NAME = "txcore"

_SEMVER = re.compile(
    r"^v?(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)(?:[-+.].*)?$"
)


def _dist_version() -> Optional[str]:
    try:
        return metadata.version(DIST_NAME)
    except metadata.PackageNotFoundError:
        return None


def resolve_version() -> str:
    """
    Determine the version string in priority:
      1) TXCORE_VERSION environment variable (leading 'v' stripped)
      2) installed package metadata
      3) DEFAULT_VERSION
    """
    env = os.getenv("TXCORE_VERSION")
    if env and _SEMVER.match(env.strip()):
        return env.strip().lstrip("v")

    return _dist_version() or DEFAULT_VERSION


__version__ = resolve_version()


if __name__ == "__main__":
    print(__version__)
