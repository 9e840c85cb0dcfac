"""Pytest configuration shared by unit and end-to-end suites.

What:
  Make the in-repo source tree importable and apply the canned runtime
  configuration to every test.

How:
  Prepend ``mailroute/src`` to ``sys.path`` when present, and define an autouse
  fixture that points ``MAILROUTE_CONFIG_PATH`` at ``tests/data/config.yaml``
  while resetting the runtime cache before and after each test.

Interfaces:
  :func:`runtime_config` (pytest fixture), :data:`DATA_DIR`.
"""

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "mailroute" / "src"
if SRC_DIR.exists():
    sys.path.insert(0, str(SRC_DIR))

import pytest

from mailroute.config.loader import reset_runtime_config

DATA_DIR = Path(__file__).resolve().parent / "data"
CONFIG_PATH = DATA_DIR / "config.yaml"


@pytest.fixture(autouse=True)
def runtime_config(monkeypatch: pytest.MonkeyPatch):
    """Apply the canned configuration file for every test.

    Args:
      monkeypatch: Pytest helper injected automatically for environment control.
    """

    monkeypatch.setenv("MAILROUTE_CONFIG_PATH", str(CONFIG_PATH))
    reset_runtime_config()
    try:
        yield
    finally:
        reset_runtime_config()
