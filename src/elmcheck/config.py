# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration model and TOML loader for elmcheck."""

from __future__ import annotations

import os
import re
import tomllib
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigError

CONFIG_FILENAME: Final[str] = "elmcheck.toml"
PYPROJECT_FILENAME: Final[str] = "pyproject.toml"
PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "elmcheck"

_ENV_VAR_PATTERN = re.compile(r"\$(\w+)|\$\{([^}]+)\}")


class OverlapPolicy(str, Enum):
    """How completions of overlapping invocations for one file are published."""

    LAST_RESOLVED = "last-resolved"
    LATEST_STARTED = "latest-started"


class Config(BaseModel):
    """Commands and switches consumed by the diagnostic pipeline."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    compiler: str = "elm"
    make_command: str = "elm-make"
    test_compiler: str = "elm-test"
    disable_linting: bool = False
    null_device: str = Field(default_factory=lambda: os.devnull)
    timeout: float | None = None
    overlap_policy: OverlapPolicy = OverlapPolicy.LAST_RESOLVED
    emoji: bool = True
    color: bool = True

    @field_validator("timeout")
    @classmethod
    def _positive_timeout(cls, value: float | None) -> float | None:
        if value is not None and value <= 0:
            raise ValueError("timeout must be positive")
        return value


def _expand_env_value(value: Any, env: Mapping[str, str]) -> Any:
    if isinstance(value, str):
        return os.path.expanduser(_expand_env_string(value, env))
    if isinstance(value, Mapping):
        return {k: _expand_env_value(v, env) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand_env_value(v, env) for v in value]
    return value


def _expand_env_string(value: str, env: Mapping[str, str]) -> str:
    def _replace(match: re.Match[str]) -> str:
        key = match.group(1) or match.group(2)
        if key is None:
            return match.group(0)
        return env.get(key, match.group(0))

    return _ENV_VAR_PATTERN.sub(_replace, value)


def _read_table(path: Path) -> Mapping[str, Any]:
    try:
        with path.open("rb") as handle:
            document = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Unable to read {path}: {exc}") from exc
    tool_table = document.get(PYPROJECT_TOOL_KEY)
    section = tool_table.get(PYPROJECT_SECTION_KEY) if isinstance(tool_table, Mapping) else None
    if section is None:
        # Only the elmcheck table of a pyproject.toml is configuration.
        return {} if path.name == PYPROJECT_FILENAME else document
    if not isinstance(section, Mapping):
        raise ConfigError(f"[tool.elmcheck] in {path} must be a table")
    return section


def load_config(
    project_root: Path | str,
    path: Path | str | None = None,
    *,
    env: Mapping[str, str] | None = None,
) -> Config:
    """Load configuration for ``project_root``.

    Args:
        project_root: Directory searched for ``elmcheck.toml`` when ``path`` is omitted.
        path: Explicit TOML file. A ``[tool.elmcheck]`` table is used when present,
            otherwise the top-level table; a ``pyproject.toml`` without that table
            yields defaults.
        env: Environment used to expand ``$VAR`` references; defaults to ``os.environ``.

    Returns:
        Config: Defaults overlaid with the file contents, or plain defaults when no
        file exists.

    Raises:
        ConfigError: If the file is unreadable, is not valid TOML, or holds
            unknown keys or invalid values.
    """

    candidate = Path(path) if path is not None else Path(project_root) / CONFIG_FILENAME
    if path is None and not candidate.is_file():
        return Config()
    if path is not None and not candidate.is_file():
        raise ConfigError(f"Configuration file {candidate} does not exist")
    data = _expand_env_value(_read_table(candidate), env if env is not None else os.environ)
    try:
        return Config.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration in {candidate}: {exc}") from exc


__all__ = ["CONFIG_FILENAME", "Config", "OverlapPolicy", "load_config"]
