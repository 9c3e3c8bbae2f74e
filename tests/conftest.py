"""
Shared test configuration.
It asserts expected behavior and guards against regressions in the corresponding component.
These tests are executed by `pytest` locally and in CI and should remain deterministic.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))


@pytest.fixture(autouse=True)
def base_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Pin the project variables and drop any campaign overrides from the outer shell."""

    defaults = {
        "PROJECT_NAME": "test-project",
        "ENV": "test",
        "LOG_LEVEL": "INFO",
    }

    for key, value in defaults.items():
        if os.getenv(key) is None:
            monkeypatch.setenv(key, value)

    for key in list(os.environ):
        if key.startswith("CAMPAIGN_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def snapshot_root(tmp_path: Path) -> Path:
    """Empty snapshot root with the primary folder already created."""

    (tmp_path / "Specifics-JSON").mkdir()
    return tmp_path
