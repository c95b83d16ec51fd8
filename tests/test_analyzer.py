# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the analyzer issue source and report rendering."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from rich.console import Console

from elmcheck.analyzer import AnalyzerIssues
from elmcheck.errors import ReportError
from elmcheck.models import Diagnostic, to_host_diagnostic
from elmcheck.reporting import count_errors, diagnostics_to_json, render_diagnostics


def _issue(file: str, overview: str, severity: str = "warning") -> Diagnostic:
    return Diagnostic(overview=overview, details="details", type=severity, file=file)


def test_issues_snapshot_is_immutable_copy() -> None:
    source = AnalyzerIssues([_issue("A.elm", "one")])
    snapshot = source.issues
    source.add(_issue("B.elm", "two"))
    assert len(snapshot) == 1
    assert [i.overview for i in source.issues] == ["one", "two"]
    source.clear()
    assert len(source) == 0


def test_from_report_loads_array(tmp_path: Path) -> None:
    report = tmp_path / "report.json"
    report.write_text(json.dumps([{"overview": "Unused", "details": "x", "file": "./src/A.elm", "type": "warning"}]))
    source = AnalyzerIssues.from_report(report)
    (issue,) = source.issues
    assert issue.file == "./src/A.elm"
    assert issue.region.start.line == 1


@pytest.mark.parametrize("content", ["{broken", '{"not": "a list"}', "[1]", '[{"overview": "no file"}]'])
def test_from_report_rejects_invalid_content(tmp_path: Path, content: str) -> None:
    report = tmp_path / "report.json"
    report.write_text(content)
    with pytest.raises(ReportError):
        AnalyzerIssues.from_report(report)


def test_from_report_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ReportError):
        AnalyzerIssues.from_report(tmp_path / "absent.json")


def test_reporting_counts_and_serialises_records() -> None:
    collections = {
        "compiler": {"/p/A.elm": (to_host_diagnostic(_issue("/p/A.elm", "BAD", "error")),)},
        "analysis": {"/p/B.elm": (to_host_diagnostic(_issue("/p/B.elm", "meh")),)},
    }
    assert count_errors(collections) == 1
    payload = json.loads(diagnostics_to_json(collections))
    assert payload["compiler"]["/p/A.elm"][0]["message"] == "BAD - details"
    assert payload["analysis"]["/p/B.elm"][0]["severity"] == 1


def test_render_diagnostics_prints_tables() -> None:
    console = Console(record=True, width=200, color_system=None)
    collections = {
        "compiler": {"/p/A.elm": (to_host_diagnostic(_issue("/p/A.elm", "BAD", "error")),)},
        "analysis": {},
    }
    render_diagnostics(collections, console=console, color=False)
    text = console.export_text()
    assert "compiler" in text
    assert "/p/A.elm" in text
    assert "1:1" in text
    assert "BAD - details" in text
    assert "analysis" not in text
