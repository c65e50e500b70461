"""
Tests for configuration: defaults, config file, environment overrides
and the module-level instance.
"""

import sys
import os
import logging
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from textdelta.config import (
    Config, ComposeConfig, SerializationConfig,
    get_config, get_config_path, load_config, reset_config, set_config,
)
from textdelta.core import Change
from textdelta.errors import MalformedRecordError
from textdelta.formats import from_python

CONFIG_TOML = """\
[serialization]
strict = true
warn_on_drop = false

[compose]
leading_retain_fast_path = false
"""


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text(CONFIG_TOML)
    return path


class TestDefaults:

    def test_values(self):
        config = Config()
        assert config.serialization == SerializationConfig(strict=False, warn_on_drop=True)
        assert config.compose == ComposeConfig(leading_retain_fast_path=True, remainder_shortcut=True)

    def test_missing_file(self, tmp_path):
        assert load_config(tmp_path / "missing.toml") == Config()


class TestConfigFile:

    def test_load(self, config_file):
        config = load_config(config_file)
        assert config.serialization.strict is True
        assert config.serialization.warn_on_drop is False
        assert config.compose.leading_retain_fast_path is False
        assert config.compose.remainder_shortcut is True

    def test_unreadable_file(self, tmp_path, caplog):
        path = tmp_path / "config.toml"
        path.write_text("strict = [unterminated")
        caplog.set_level(logging.WARNING, logger="textdelta.config")
        assert load_config(path) == Config()
        assert "Ignoring unreadable config file" in caplog.text

    def test_xdg_path(self, tmp_path, monkeypatch):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert get_config_path() == tmp_path / "textdelta" / "config.toml"

    def test_home_path(self, tmp_path, monkeypatch):
        monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))
        assert get_config_path() == tmp_path / ".config" / "textdelta" / "config.toml"


class TestEnvironment:

    @pytest.mark.parametrize("value,expected", [
        ("1", True), ("true", True), ("YES", True), ("0", False), ("no", False),
    ])
    def test_strict(self, tmp_path, monkeypatch, value, expected):
        monkeypatch.setenv("TEXTDELTA_STRICT", value)
        assert load_config(tmp_path / "missing.toml").serialization.strict is expected

    def test_env_beats_file(self, config_file, monkeypatch):
        monkeypatch.setenv("TEXTDELTA_STRICT", "0")
        monkeypatch.setenv("TEXTDELTA_REMAINDER_SHORTCUT", "false")
        config = load_config(config_file)
        assert config.serialization.strict is False
        assert config.compose.remainder_shortcut is False
        # untouched by the environment
        assert config.compose.leading_retain_fast_path is False


class TestGlobalInstance:

    def test_lazy_load(self, tmp_path, monkeypatch):
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        target = tmp_path / "textdelta" / "config.toml"
        target.parent.mkdir()
        target.write_text(CONFIG_TOML)
        reset_config()
        config = get_config()
        assert config.serialization.strict is True
        assert get_config() is config

    def test_set_config_reaches_the_algebra(self):
        set_config(Config(serialization=SerializationConfig(strict=True)))
        with pytest.raises(MalformedRecordError):
            from_python([{"retain": True}])
        set_config(Config())
        assert from_python([{"retain": True}]) == Change()
