# SPDX-License-Identifier: Apache-2.0
"""Helpers shared by the unit tests: fixture lookup under tests/fixtures/."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

FIXTURES: Path = Path(__file__).resolve().parent.parent / "fixtures"


def read_json_fixture(name: str) -> Any:
    return json.loads((FIXTURES / name).read_text(encoding="utf-8"))


__all__ = ["FIXTURES", "read_json_fixture"]
