"""Configuration: defaults and loading from a TOML file."""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_INCLUDE_EXTENSIONS = (
    "py", "json", "sh", "txt", "rst", "md", "go", "mod", "sum", "yaml", "yml",
)
DEFAULT_EXCLUDE_BASENAMES = (
    "*.log",
    "*.pyc",
    "*.pyo",
    "*.swp",
    "*.swo",
    "*~",
    ".DS_Store",
    ".git",
    ".hg",
    ".svn",
    "__pycache__",
    "node_modules",
    "venv",
    ".venv",
    "build",
    "dist",
    "target",
)
DEFAULT_COMMENT_MARKER = "---"
DEFAULT_HEADER_TEXT = "----- Codebase for analysis -----\n"


class ConfigError(Exception):
    """Raised when an explicitly requested config file cannot be used."""


@dataclass
class Config:
    """Settings that control scanning and output."""

    include_extensions: list[str] = field(
        default_factory=lambda: list(DEFAULT_INCLUDE_EXTENSIONS)
    )
    exclude_basenames: list[str] = field(
        default_factory=lambda: list(DEFAULT_EXCLUDE_BASENAMES)
    )
    comment_marker: str = DEFAULT_COMMENT_MARKER
    header_text: str = DEFAULT_HEADER_TEXT
    use_gitignore: bool = True


def default_config() -> Config:
    """Return a fresh Config holding the built-in defaults."""
    return Config()


def _is_str_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


_VALIDATORS = {
    "include_extensions": (_is_str_list, "an array of strings"),
    "exclude_basenames": (_is_str_list, "an array of strings"),
    "comment_marker": (lambda v: isinstance(v, str), "a string"),
    "header_text": (lambda v: isinstance(v, str), "a string"),
    "use_gitignore": (lambda v: isinstance(v, bool), "a boolean"),
}


def _overlay(config: Config, data: dict[str, Any]) -> list[str]:
    """Apply TOML data onto config; return keys that were not recognised."""
    unknown = []
    for key, value in data.items():
        check = _VALIDATORS.get(key)
        if check is None:
            unknown.append(key)
            continue
        is_valid, expected = check
        if not is_valid(value):
            raise ValueError(f"key '{key}' must be {expected}")
        setattr(config, key, list(value) if isinstance(value, list) else value)
    return unknown


def _default_config_path() -> Path | None:
    try:
        home = Path.home()
    except (RuntimeError, KeyError, OSError) as exc:
        logger.warning(
            "Could not determine user home directory. Using default settings only. error=%s",
            exc,
        )
        return None
    return home / ".config" / "codecat" / "config.toml"


def load_config(custom_path: str | os.PathLike | None = None) -> Config:
    """Load configuration, overlaying a TOML file on the defaults.

    Without custom_path, ~/.config/codecat/config.toml is read if present and
    any problem with it falls back to the defaults. With custom_path, a
    missing, unreadable or malformed file raises ConfigError.
    """
    is_custom = bool(custom_path)
    if is_custom:
        try:
            config_file = Path(os.path.abspath(custom_path))
        except (OSError, ValueError) as exc:
            raise ConfigError(f"invalid custom config path '{custom_path}': {exc}") from exc
        logger.debug("Attempting to load configuration from custom path. path=%s", config_file)
    else:
        found = _default_config_path()
        if found is None:
            return default_config()
        config_file = found
        logger.debug("Attempting to load configuration from default path. path=%s", config_file)

    try:
        content = config_file.read_bytes()
    except FileNotFoundError as exc:
        if is_custom:
            raise ConfigError(
                f"specified configuration file '{config_file}' not found"
            ) from exc
        logger.info("No default config file found, using default settings. path=%s", config_file)
        return default_config()
    except OSError as exc:
        if is_custom:
            raise ConfigError(f"error reading config file '{config_file}': {exc}") from exc
        logger.warning(
            "Using default settings due to error reading default config file. path=%s error=%s",
            config_file, exc,
        )
        return default_config()

    if not content:
        log = logger.warning if is_custom else logger.info
        log("Configuration file is empty, using default settings. path=%s", config_file)
        return default_config()

    logger.info("Loading configuration. path=%s", config_file)
    config = default_config()
    try:
        data = tomllib.loads(content.decode("utf-8"))
        unknown = _overlay(config, data)
    except ValueError as exc:
        if is_custom:
            raise ConfigError(f"error decoding TOML from '{config_file}': {exc}") from exc
        logger.warning(
            "Using default settings due to error decoding default config file. path=%s error=%s",
            config_file, exc,
        )
        return default_config()

    if unknown:
        logger.warning(
            "Unrecognized keys found in config file. path=%s keys=%s", config_file, unknown
        )
    logger.debug("Configuration loaded successfully. source=%s config=%s", config_file, config)
    return config