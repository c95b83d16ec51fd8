# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""In-memory source of static-analyzer issues."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from pathlib import Path

from pydantic import ValidationError

from .errors import ReportError
from .models import Diagnostic


class AnalyzerIssues:
    """Ordered, mutable snapshot of the issues the analyzer currently reports.

    The analyzer owns the contents; the publisher only reads :attr:`issues`.
    """

    def __init__(self, issues: Iterable[Diagnostic] = ()) -> None:
        self._issues: list[Diagnostic] = list(issues)

    @property
    def issues(self) -> tuple[Diagnostic, ...]:
        return tuple(self._issues)

    def add(self, issue: Diagnostic) -> None:
        self._issues.append(issue)

    def replace(self, issues: Iterable[Diagnostic]) -> None:
        self._issues = list(issues)

    def clear(self) -> None:
        self._issues.clear()

    def __len__(self) -> int:
        return len(self._issues)

    @classmethod
    def from_report(cls, path: Path | str) -> AnalyzerIssues:
        """Load issues from a JSON array of diagnostic-shaped objects.

        Raises:
            ReportError: If the file is unreadable or its entries do not
                describe diagnostics.
        """

        report = Path(path)
        try:
            payload = json.loads(report.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            raise ReportError(f"Unable to load analyzer report {report}: {exc}") from exc
        if not isinstance(payload, list):
            raise ReportError(f"Analyzer report {report} must hold a JSON array")
        issues: list[Diagnostic] = []
        for entry in payload:
            if not isinstance(entry, Mapping):
                raise ReportError(f"Analyzer report {report} holds a non-object entry")
            try:
                issues.append(Diagnostic.model_validate(entry))
            except ValidationError as exc:
                raise ReportError(f"Invalid issue in {report}: {exc}") from exc
        return cls(issues)


__all__ = ["AnalyzerIssues"]
