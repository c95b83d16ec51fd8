# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for project root, generation and test-file detection."""

from __future__ import annotations

from pathlib import Path

from elmcheck.project import (
    ToolchainGeneration,
    detect_project_root,
    detect_project_root_and_generation,
    is_test_file,
)


def test_elm_json_marks_current_generation(elm_project: Path) -> None:
    root, generation = detect_project_root_and_generation(elm_project / "src" / "Main.elm")
    assert root == elm_project
    assert generation is ToolchainGeneration.JSON_REPORT


def test_elm_package_json_marks_legacy_generation(legacy_project: Path) -> None:
    root, generation = detect_project_root_and_generation(legacy_project / "src" / "Main.elm")
    assert root == legacy_project
    assert generation is ToolchainGeneration.LEGACY


def test_elm_package_json_with_019_constraint(tmp_path: Path) -> None:
    (tmp_path / "elm-package.json").write_text('{"elm-version": "0.19.0 <= v < 0.20.0"}', encoding="utf-8")
    _, generation = detect_project_root_and_generation(tmp_path / "Main.elm")
    assert generation is ToolchainGeneration.JSON_REPORT


def test_unreadable_legacy_manifest_stays_legacy(tmp_path: Path) -> None:
    (tmp_path / "elm-package.json").write_text("{broken", encoding="utf-8")
    _, generation = detect_project_root_and_generation(tmp_path / "Main.elm")
    assert generation is ToolchainGeneration.LEGACY


def test_nested_file_finds_nearest_manifest(elm_project: Path) -> None:
    nested = elm_project / "src" / "Page" / "Home.elm"
    nested.parent.mkdir()
    nested.write_text("module Page.Home exposing (..)\n", encoding="utf-8")
    assert detect_project_root(nested) == elm_project


def test_missing_manifest_falls_back_to_workspace(tmp_path: Path) -> None:
    source = tmp_path / "loose" / "Main.elm"
    source.parent.mkdir()
    workspace = tmp_path / "workspace"
    root, generation = detect_project_root_and_generation(source, workspace)
    assert root == workspace
    assert generation is ToolchainGeneration.JSON_REPORT


def test_missing_manifest_without_workspace_uses_file_directory(tmp_path: Path) -> None:
    source = tmp_path / "Main.elm"
    root, _ = detect_project_root_and_generation(source)
    assert root == tmp_path


def test_is_test_file_relative_to_project_root(elm_project: Path) -> None:
    assert is_test_file(elm_project / "tests" / "MainTest.elm", elm_project)
    assert not is_test_file(elm_project / "src" / "Main.elm", elm_project)


def test_is_test_file_ignores_tests_directory_above_root(tmp_path: Path) -> None:
    root = tmp_path / "tests" / "app"
    assert not is_test_file(root / "src" / "Main.elm", root)
    assert is_test_file(root / "src" / "Main.elm")


def test_legacy_constraint_upper_bound_does_not_select_current_generation(tmp_path: Path) -> None:
    (tmp_path / "elm-package.json").write_text('{"elm-version": "0.18.0 <= v < 0.19.0"}', encoding="utf-8")
    _, generation = detect_project_root_and_generation(tmp_path / "Main.elm")
    assert generation is ToolchainGeneration.LEGACY


def test_legacy_constraint_without_version_stays_legacy(tmp_path: Path) -> None:
    (tmp_path / "elm-package.json").write_text('{"elm-version": "any"}', encoding="utf-8")
    _, generation = detect_project_root_and_generation(tmp_path / "Main.elm")
    assert generation is ToolchainGeneration.LEGACY
