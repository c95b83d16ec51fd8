# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Project root, toolchain generation and test-file detection."""

from __future__ import annotations

import json
import logging
import re
from enum import Enum
from pathlib import Path
from typing import Final

LOGGER = logging.getLogger(__name__)

ELM_JSON: Final[str] = "elm.json"
ELM_PACKAGE_JSON: Final[str] = "elm-package.json"
TESTS_DIRECTORY: Final[str] = "tests"
# Lower bound of an elm-package.json constraint such as "0.18.0 <= v < 0.19.0".
_LOWER_BOUND = re.compile(r"^\s*(\d+)\.(\d+)")
FIRST_JSON_REPORT_VERSION: Final[tuple[int, int]] = (0, 19)


class ToolchainGeneration(str, Enum):
    """Compiler generations, which differ in how they report problems."""

    LEGACY = "0.18"
    JSON_REPORT = "0.19"


def detect_project_root(path: Path | str) -> Path | None:
    """Return the nearest directory above ``path`` holding an Elm manifest."""

    candidate = Path(path).expanduser().absolute()
    start = candidate if candidate.is_dir() else candidate.parent
    for directory in (start, *start.parents):
        if (directory / ELM_JSON).is_file() or (directory / ELM_PACKAGE_JSON).is_file():
            return directory
    return None


def _legacy_manifest_generation(manifest: Path) -> ToolchainGeneration:
    try:
        payload = json.loads(manifest.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        LOGGER.debug("unable to read %s: %s", manifest, exc)
        return ToolchainGeneration.LEGACY
    constraint = payload.get("elm-version", "") if isinstance(payload, dict) else ""
    match = _LOWER_BOUND.match(constraint) if isinstance(constraint, str) else None
    if match is not None and (int(match.group(1)), int(match.group(2))) >= FIRST_JSON_REPORT_VERSION:
        return ToolchainGeneration.JSON_REPORT
    return ToolchainGeneration.LEGACY


def detect_project_root_and_generation(
    file_path: Path | str,
    workspace_root: Path | str | None = None,
) -> tuple[Path, ToolchainGeneration]:
    """Locate the project owning ``file_path`` and its toolchain generation.

    Args:
        file_path: Source file being compiled.
        workspace_root: Fallback root used when no manifest is found.

    Returns:
        tuple[Path, ToolchainGeneration]: The project root and the generation
        implied by its manifest. ``elm.json`` means 0.19; ``elm-package.json``
        means 0.18 unless the lower bound of its ``elm-version`` constraint is 0.19
        or later. Without a manifest the workspace root (or the file's
        directory) is returned with the current generation.
    """

    root = detect_project_root(file_path)
    if root is None:
        fallback = Path(workspace_root) if workspace_root is not None else Path(file_path).absolute().parent
        LOGGER.debug("no Elm manifest above %s; using %s", file_path, fallback)
        return fallback, ToolchainGeneration.JSON_REPORT
    if (root / ELM_JSON).is_file():
        return root, ToolchainGeneration.JSON_REPORT
    return root, _legacy_manifest_generation(root / ELM_PACKAGE_JSON)


def is_test_file(file_path: Path | str, project_root: Path | str | None = None) -> bool:
    """Return ``True`` when ``file_path`` lives under a ``tests`` directory."""

    path = Path(file_path).absolute()
    if project_root is not None:
        try:
            path = path.relative_to(Path(project_root).absolute())
        except ValueError:
            pass
    return TESTS_DIRECTORY in path.parts[:-1]


__all__ = [
    "ToolchainGeneration",
    "detect_project_root",
    "detect_project_root_and_generation",
    "is_test_file",
]
