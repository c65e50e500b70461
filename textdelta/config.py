"""
Configuration for textdelta.

All tunable parameters in one place. Loaded from:
1. Defaults (this file)
2. Config file (~/.config/textdelta/config.toml) if exists
3. Environment variables (TEXTDELTA_*) override file
4. set_config() overrides everything
"""

from __future__ import annotations

import contextlib
import logging
import os
import tomllib  # stdlib in 3.11+
from dataclasses import dataclass, field
from pathlib import Path

LOGGER = logging.getLogger(__name__)


@dataclass
class SerializationConfig:
    """How serialized operation records are read back."""
    strict: bool = False  # raise on unrecognized records instead of dropping them
    warn_on_drop: bool = True


@dataclass
class ComposeConfig:
    """Shortcuts taken by Change.compose. Turn off to force the plain pairwise walk."""
    leading_retain_fast_path: bool = True
    remainder_shortcut: bool = True


@dataclass
class Config:
    """Root config with all settings."""
    serialization: SerializationConfig = field(default_factory=SerializationConfig)
    compose: ComposeConfig = field(default_factory=ComposeConfig)


def get_config_path() -> Path:
    """Get config file path, respecting XDG."""
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "textdelta" / "config.toml"
    return Path.home() / ".config" / "textdelta" / "config.toml"


def load_config(path: Path | None = None) -> Config:
    """Load config from file if exists, else return defaults."""
    config = Config()
    path = path or get_config_path()

    if path.exists():
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
            config = _apply_toml(config, data)
        except (OSError, tomllib.TOMLDecodeError, TypeError, ValueError):
            LOGGER.warning("Ignoring unreadable config file %s", path, exc_info=True)

    # env var overrides
    config = _apply_env(config)

    return config


def _apply_toml(config: Config, data: dict) -> Config:
    """Apply toml data to config."""
    if "serialization" in data:
        s = data["serialization"]
        if "strict" in s:
            config.serialization.strict = bool(s["strict"])
        if "warn_on_drop" in s:
            config.serialization.warn_on_drop = bool(s["warn_on_drop"])

    if "compose" in data:
        c = data["compose"]
        if "leading_retain_fast_path" in c:
            config.compose.leading_retain_fast_path = bool(c["leading_retain_fast_path"])
        if "remainder_shortcut" in c:
            config.compose.remainder_shortcut = bool(c["remainder_shortcut"])

    return config


def _apply_env(config: Config) -> Config:
    """Apply environment variable overrides."""
    env_map: dict[str, tuple[str, str]] = {
        "TEXTDELTA_STRICT": ("serialization", "strict"),
        "TEXTDELTA_WARN_ON_DROP": ("serialization", "warn_on_drop"),
        "TEXTDELTA_FAST_PATH": ("compose", "leading_retain_fast_path"),
        "TEXTDELTA_REMAINDER_SHORTCUT": ("compose", "remainder_shortcut"),
    }

    for env_key, (section, attr) in env_map.items():
        val = os.environ.get(env_key)
        if val is not None:
            with contextlib.suppress(AttributeError):
                # "true", "1", "yes" -> True
                setattr(getattr(config, section), attr, val.lower() in ("true", "1", "yes"))

    return config


# Module-level config instance, loaded lazily on first use
_config: Config | None = None


def get_config() -> Config:
    """Get the global config instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: Config) -> None:
    """Replace the global config instance."""
    global _config
    _config = config


def reset_config() -> None:
    """Drop the global config so the next get_config() reloads it."""
    global _config
    _config = None
