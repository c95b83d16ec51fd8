# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for configuration defaults and TOML loading."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from elmcheck.config import CONFIG_FILENAME, Config, OverlapPolicy, load_config
from elmcheck.errors import ConfigError


def test_defaults() -> None:
    cfg = Config()
    assert cfg.compiler == "elm"
    assert cfg.make_command == "elm-make"
    assert cfg.test_compiler == "elm-test"
    assert cfg.disable_linting is False
    assert cfg.null_device == os.devnull
    assert cfg.timeout is None
    assert cfg.overlap_policy is OverlapPolicy.LAST_RESOLVED


def test_missing_file_returns_defaults(tmp_path: Path) -> None:
    assert load_config(tmp_path) == Config()


def test_project_file_overrides_defaults(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILENAME).write_text(
        'compiler = "$ELM_HOME/bin/elm"\ntimeout = 30\noverlap_policy = "latest-started"\n',
        encoding="utf-8",
    )
    cfg = load_config(tmp_path, env={"ELM_HOME": "/opt/elm"})
    assert cfg.compiler == "/opt/elm/bin/elm"
    assert cfg.timeout == 30
    assert cfg.overlap_policy is OverlapPolicy.LATEST_STARTED


def test_explicit_file_reads_tool_table(tmp_path: Path) -> None:
    config_file = tmp_path / "settings.toml"
    config_file.write_text('[tool.elmcheck]\ndisable_linting = true\nmake_command = "make18"\n', encoding="utf-8")
    cfg = load_config(tmp_path / "elsewhere", config_file)
    assert cfg.disable_linting is True
    assert cfg.make_command == "make18"


def test_unexpanded_variable_is_kept(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILENAME).write_text('test_compiler = "${MISSING}/elm-test"\n', encoding="utf-8")
    assert load_config(tmp_path, env={}).test_compiler == "${MISSING}/elm-test"


@pytest.mark.parametrize(
    "content",
    [
        "compiler = \n",
        'unknown_key = "value"\n',
        "timeout = -1\n",
        'overlap_policy = "first-wins"\n',
    ],
)
def test_invalid_configuration_raises(tmp_path: Path, content: str) -> None:
    (tmp_path / CONFIG_FILENAME).write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_explicit_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_config(tmp_path, tmp_path / "absent.toml")


def test_pyproject_without_tool_table_yields_defaults(tmp_path: Path) -> None:
    pyproject = tmp_path / "pyproject.toml"
    pyproject.write_text('[project]\nname = "site"\n\n[tool.black]\nline-length = 100\n', encoding="utf-8")
    assert load_config(tmp_path, pyproject) == Config()


def test_pyproject_tool_table_is_used(tmp_path: Path) -> None:
    pyproject = tmp_path / "pyproject.toml"
    pyproject.write_text('[project]\nname = "site"\n\n[tool.elmcheck]\ncompiler = "elm19"\n', encoding="utf-8")
    assert load_config(tmp_path, pyproject).compiler == "elm19"
