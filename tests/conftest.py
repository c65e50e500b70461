"""Shared pytest fixtures."""

import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from textdelta.config import Config, reset_config, set_config

CONFIG_ENV_VARS = (
    "TEXTDELTA_STRICT",
    "TEXTDELTA_WARN_ON_DROP",
    "TEXTDELTA_FAST_PATH",
    "TEXTDELTA_REMAINDER_SHORTCUT",
)


@pytest.fixture(autouse=True)
def default_config(monkeypatch):
    """Every test starts from built-in defaults, whatever the machine has configured."""
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    set_config(Config())
    yield
    reset_config()
