# SPDX-License-Identifier: Apache-2.0
"""
Hypothesis setup shared by the property suites.

Profiles: dev (default locally), ci (picked when CI is set), fast.
HYPOTHESIS_PROFILE overrides the choice.
"""
from __future__ import annotations

import os

from hypothesis import HealthCheck, Verbosity, given, settings
from hypothesis import strategies as st

# The first digest call resolves its backend, so no per-example deadline.
_COMMON = dict(deadline=None, suppress_health_check=(HealthCheck.too_slow,))

settings.register_profile("dev", max_examples=100, **_COMMON)
settings.register_profile(
    "ci", max_examples=200, derandomize=True, verbosity=Verbosity.verbose, **_COMMON
)
settings.register_profile("fast", max_examples=25, deadline=None)


def _on_ci() -> bool:
    return os.getenv("CI", "").strip().lower() not in ("", "0", "false", "no", "off")


PROFILE = os.getenv("HYPOTHESIS_PROFILE") or ("ci" if _on_ci() else "dev")
settings.load_profile(PROFILE)

__all__ = ["st", "given", "PROFILE"]
