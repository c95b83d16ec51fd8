# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Reconcile compiler and analyzer diagnostics and publish them per file.

The publisher is the only writer of the two diagnostic surfaces. Each save
replaces what was published: the analyzer surface is regrouped from the
analyzer's full issue list, dropping files that no longer have issues, and
the compiler surface receives one group per file named in the latest
compiler run. Only the saved file is cleared from the compiler surface up
front; other files keep their records until a run names them again. The
compiler stops at the first problem it cannot recover from, so a run rarely
reports the whole project.
"""

from __future__ import annotations

import itertools
import logging
import os
from collections.abc import Awaitable, Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Final, Protocol

from .analyzer import AnalyzerIssues
from .config import Config, OverlapPolicy
from .errors import ElmCheckError
from .invocation import CompilerInvocation, InvocationResult
from .logging import Notifier
from .models import Diagnostic, HostDiagnostic, to_host_diagnostic
from .project import detect_project_root

LOGGER = logging.getLogger(__name__)

ELM_LANGUAGE_ID: Final[str] = "elm"
FILE_SCHEME: Final[str] = "file"
COMPILER_SOURCE: Final[str] = "elm-make"
ANALYZER_SOURCE: Final[str] = "elm-analyse"

Invoker = Callable[[str], Awaitable[InvocationResult]]


class DiagnosticSurface(Protocol):
    """Host-side sink replacing every record published for a location."""

    def set(self, location: str, records: Sequence[HostDiagnostic] | None) -> None:
        """Replace the records for ``location``; ``None`` or empty clears them."""
        ...


class DiagnosticCollection:
    """In-memory diagnostic surface keyed by file path.

    Args:
        name: Label shown when the collection is rendered.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._entries: dict[str, tuple[HostDiagnostic, ...]] = {}

    def set(self, location: str, records: Sequence[HostDiagnostic] | None) -> None:
        """Replace the records published for ``location``.

        Args:
            location: Absolute path of the file the records belong to.
            records: New records; ``None`` or an empty sequence removes the entry.
        """

        if records:
            self._entries[location] = tuple(records)
        else:
            self._entries.pop(location, None)

    def get(self, location: str) -> tuple[HostDiagnostic, ...]:
        """Return the records published for ``location``, or an empty tuple."""

        return self._entries.get(location, ())

    @property
    def locations(self) -> tuple[str, ...]:
        """Files that currently have records, in publication order."""

        return tuple(self._entries)

    def snapshot(self) -> Mapping[str, tuple[HostDiagnostic, ...]]:
        """Return a read-only copy of every published entry.

        Returns:
            Mapping[str, tuple[HostDiagnostic, ...]]: Records keyed by file; later
            writes to the collection do not show through.
        """

        return MappingProxyType(dict(self._entries))

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return sum(len(records) for records in self._entries.values())


@dataclass(frozen=True, slots=True)
class SavedDocument:
    """A document the editor has just written to disk."""

    path: str
    language_id: str = ELM_LANGUAGE_ID
    scheme: str = FILE_SCHEME

    @classmethod
    def from_path(cls, path: str | Path) -> SavedDocument:
        """Describe an on-disk file, recognising Elm sources by extension."""

        language = ELM_LANGUAGE_ID if Path(path).suffix == ".elm" else "plaintext"
        return cls(path=os.path.abspath(path), language_id=language)


@dataclass(slots=True)
class PublishReport:
    """What a single save event published."""

    document: str
    skipped: bool = False
    compiler_files: dict[str, int] = field(default_factory=dict)
    analyzer_files: dict[str, int] = field(default_factory=dict)
    error: ElmCheckError | None = None
    stale: bool = False
    compiler_missing: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


def resolve_issue_path(file: str, project_root: str | Path | None) -> str:
    """Return ``file`` as an absolute path.

    Relative paths such as ``./src/Main.elm`` are joined onto ``project_root``
    and normalised; absolute paths pass through unchanged.
    """

    if os.path.isabs(file) or project_root is None:
        return file
    return os.path.normpath(os.path.join(str(project_root), file))


def group_by_file(
    diagnostics: Iterable[Diagnostic],
    *,
    project_root: str | Path | None = None,
) -> dict[str, list[Diagnostic]]:
    """Group ``diagnostics`` by resolved file, preserving arrival order."""

    grouped: dict[str, list[Diagnostic]] = {}
    for diagnostic in diagnostics:
        location = resolve_issue_path(diagnostic.file, project_root)
        resolved = diagnostic if location == diagnostic.file else diagnostic.with_file(location)
        grouped.setdefault(location, []).append(resolved)
    return grouped


class DiagnosticPublisher:
    """Single writer of the compiler and analyzer diagnostic surfaces.

    Args:
        config: Pipeline configuration; ``disable_linting`` turns saves into no-ops
            and ``overlap_policy`` decides how overlapping runs are published.
        analyzer: Source of the analyzer's current issues.
        compiler_surface: Surface receiving compiler diagnostics.
        analyzer_surface: Surface receiving analyzer diagnostics.
        workspace_root: Fallback root for files outside any Elm project.
        notifier: Receives user-facing notices such as a missing compiler.
        invoke: Coroutine running the compiler for a file. Defaults to
            :class:`CompilerInvocation`.
    """

    def __init__(
        self,
        *,
        config: Config | None = None,
        analyzer: AnalyzerIssues | None = None,
        compiler_surface: DiagnosticSurface | None = None,
        analyzer_surface: DiagnosticSurface | None = None,
        workspace_root: str | Path | None = None,
        notifier: Notifier | None = None,
        invoke: Invoker | None = None,
    ) -> None:
        self.config = config or Config()
        self.analyzer = analyzer if analyzer is not None else AnalyzerIssues()
        self._compiler_surface: DiagnosticSurface = (
            compiler_surface if compiler_surface is not None else DiagnosticCollection(f"{COMPILER_SOURCE}-diagnostics")
        )
        self._analyzer_surface: DiagnosticSurface = (
            analyzer_surface if analyzer_surface is not None else DiagnosticCollection(f"{ANALYZER_SOURCE}-diagnostics")
        )
        self.workspace_root = str(workspace_root) if workspace_root is not None else None
        self._notifier = notifier
        self._invoke = invoke or self._run_compiler
        self._sequence = itertools.count(1)
        self._started: dict[str, int] = {}
        self._analyzer_locations: set[str] = set()

    @property
    def compiler_surface(self) -> DiagnosticSurface:
        return self._compiler_surface

    @property
    def analyzer_surface(self) -> DiagnosticSurface:
        return self._analyzer_surface

    async def _run_compiler(self, file: str) -> InvocationResult:
        invocation = CompilerInvocation(
            file,
            workspace_root=self.workspace_root,
            config=self.config,
            notifier=self._notifier,
        )
        return await invocation.run()

    @staticmethod
    def accepts(document: SavedDocument) -> bool:
        return document.language_id == ELM_LANGUAGE_ID and document.scheme == FILE_SCHEME

    async def on_save(self, document: SavedDocument) -> PublishReport:
        """Republish diagnostics after ``document`` was saved.

        Invocation failures are logged and returned on the report; they never
        propagate, and no compiler group is published for a failed run.
        """

        location = os.path.abspath(document.path)
        report = PublishReport(document=location)
        if self.config.disable_linting or not self.accepts(document):
            report.skipped = True
            return report

        self._analyzer_surface.set(location, None)
        self._compiler_surface.set(location, None)
        report.analyzer_files = self._publish_analyzer(location)

        token = next(self._sequence)
        self._started[location] = token
        try:
            result = await self._invoke(location)
        except ElmCheckError as exc:
            LOGGER.warning("compiler run for %s failed: %s", location, exc)
            report.error = exc
            return report
        finally:
            superseded = self._started.get(location) != token
            if not superseded:
                del self._started[location]

        report.compiler_missing = result.compiler_missing
        if self.config.overlap_policy is OverlapPolicy.LATEST_STARTED and superseded:
            LOGGER.debug("discarding superseded run for %s", location)
            report.stale = True
            return report

        for file, diagnostics in group_by_file(result.diagnostics, project_root=result.project_root).items():
            self._compiler_surface.set(file, [to_host_diagnostic(d, source=COMPILER_SOURCE) for d in diagnostics])
            report.compiler_files[file] = len(diagnostics)
        return report

    def _publish_analyzer(self, location: str) -> dict[str, int]:
        """Replace the whole analyzer surface with the analyzer's current issues.

        Args:
            location: Saved file, used to find the root relative issue paths resolve against.

        Returns:
            dict[str, int]: Number of issues published per file.
        """

        root = detect_project_root(location) or self.workspace_root
        published: dict[str, int] = {}
        for file, issues in group_by_file(self.analyzer.issues, project_root=root).items():
            self._analyzer_surface.set(file, [to_host_diagnostic(i, source=ANALYZER_SOURCE) for i in issues])
            published[file] = len(issues)
        for file in self._analyzer_locations - published.keys():
            self._analyzer_surface.set(file, None)
        self._analyzer_locations = set(published)
        return published


__all__ = [
    "ANALYZER_SOURCE",
    "COMPILER_SOURCE",
    "DiagnosticCollection",
    "DiagnosticPublisher",
    "DiagnosticSurface",
    "PublishReport",
    "SavedDocument",
    "group_by_file",
    "resolve_issue_path",
]
