# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import json
import os
import stat
import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import pytest

FAKE_COMPILER_TEMPLATE = """#!{python}
import json
import os
import sys
import time

with open({log!r}, "w", encoding="utf-8") as handle:
    json.dump({{"argv": sys.argv[1:], "cwd": os.getcwd()}}, handle)
time.sleep({delay!r})
sys.stdout.write({stdout!r})
sys.stdout.flush()
sys.stderr.write({stderr!r})
sys.stderr.flush()
sys.exit({exit_code!r})
"""


@dataclass(slots=True)
class FakeCompiler:
    """Executable script standing in for the Elm compiler."""

    path: Path
    log: Path

    def invocation(self) -> dict[str, object]:
        """Return the argv and cwd recorded by the last run."""
        return json.loads(self.log.read_text(encoding="utf-8"))


FakeCompilerFactory = Callable[..., FakeCompiler]


@pytest.fixture
def fake_compiler(tmp_path: Path) -> FakeCompilerFactory:
    """Return a factory writing fake compiler scripts into ``tmp_path``."""

    if os.name == "nt":
        pytest.skip("fake compilers rely on POSIX shebang execution")
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir(exist_ok=True)

    def _factory(
        name: str = "elm",
        *,
        stdout: str = "",
        stderr: str = "",
        exit_code: int = 0,
        delay: float = 0.0,
    ) -> FakeCompiler:
        script = bin_dir / name
        log = bin_dir / f"{name}.log.json"
        script.write_text(
            FAKE_COMPILER_TEMPLATE.format(
                python=sys.executable,
                log=str(log),
                delay=delay,
                stdout=stdout,
                stderr=stderr,
                exit_code=exit_code,
            ),
            encoding="utf-8",
        )
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return FakeCompiler(path=script, log=log)

    return _factory


@pytest.fixture
def elm_project(tmp_path: Path) -> Path:
    """Create an Elm 0.19 project with ``src/Main.elm`` and a test module."""

    root = tmp_path / "project"
    (root / "src").mkdir(parents=True)
    (root / "tests").mkdir()
    (root / "elm.json").write_text('{"type": "application"}', encoding="utf-8")
    (root / "src" / "Main.elm").write_text("module Main exposing (main)\n", encoding="utf-8")
    (root / "tests" / "MainTest.elm").write_text("module MainTest exposing (suite)\n", encoding="utf-8")
    return root


@pytest.fixture
def legacy_project(tmp_path: Path) -> Path:
    """Create an Elm 0.18 project with ``src/Main.elm``."""

    root = tmp_path / "legacy"
    (root / "src").mkdir(parents=True)
    (root / "elm-package.json").write_text('{"elm-version": "0.18.0 <= v < 0.19.0"}', encoding="utf-8")
    (root / "src" / "Main.elm").write_text("module Main exposing (..)\n", encoding="utf-8")
    return root
