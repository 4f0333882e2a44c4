"""Integration test fixtures.

The CLI runs in a subprocess with an environment isolated from the developer's
own MIMEREGISTRY__* settings and a cache file under ``tmp_path``.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture()
def cache_path(tmp_path: Path) -> Path:
    return tmp_path / "cache" / "types.cache"


@pytest.fixture()
def subprocess_env(cache_path: Path) -> dict[str, str]:
    env = {k: v for k, v in os.environ.items() if not k.startswith("MIMEREGISTRY__")}
    env["MIMEREGISTRY__CACHE__PATH"] = str(cache_path)
    env["MIMEREGISTRY__LOGGING__LEVEL"] = "INFO"
    env["MIMEREGISTRY__LOGGING__FORMAT"] = "json"
    return env
