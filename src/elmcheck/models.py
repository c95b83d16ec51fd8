# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Core data models shared across the elmcheck package."""

from __future__ import annotations

import re
from typing import Final

from pydantic import BaseModel, ConfigDict, Field

from .severity import HostSeverity, Severity, severity_from_label

_ANSI_MARKER: Final[re.Pattern[str]] = re.compile(r"\x1b?\[\d+m")
_MESSAGE_SEPARATOR: Final[str] = " - "


class Position(BaseModel):
    """1-indexed line/column location inside a source file."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    line: int
    column: int


class Region(BaseModel):
    """Start/end span locating a diagnostic, 1-indexed."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    start: Position
    end: Position


def synthetic_region() -> Region:
    """Return the 1,1-1,1 region used for whole-project failures."""

    origin = Position(line=1, column=1)
    return Region(start=origin, end=origin)


class Diagnostic(BaseModel):
    """Normalized compiler or analyzer issue."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    tag: str = "error"
    overview: str = ""
    subregion: str = ""
    details: str = ""
    region: Region = Field(default_factory=synthetic_region)
    type: str = Severity.ERROR.value
    file: str

    def with_file(self, file: str) -> Diagnostic:
        """Return a copy of the diagnostic pointing at ``file``."""

        return self.model_copy(update={"file": file})


class HostPosition(BaseModel):
    """0-indexed position as understood by the editor."""

    model_config = ConfigDict(frozen=True)

    line: int
    character: int


class HostRange(BaseModel):
    """0-indexed editor range."""

    model_config = ConfigDict(frozen=True)

    start: HostPosition
    end: HostPosition


class HostDiagnostic(BaseModel):
    """Editor-facing diagnostic record published to a diagnostic surface."""

    model_config = ConfigDict(frozen=True)

    range: HostRange
    message: str
    severity: HostSeverity
    source: str | None = None


def strip_ansi(text: str) -> str:
    """Remove terminal colour markers such as ``\\x1b[31m`` from ``text``."""

    return _ANSI_MARKER.sub("", text)


def _host_position(position: Position) -> HostPosition:
    # Editors count from zero; clamp so malformed upstream data cannot go negative.
    return HostPosition(line=max(position.line - 1, 0), character=max(position.column - 1, 0))


def to_host_diagnostic(diagnostic: Diagnostic, *, source: str | None = None) -> HostDiagnostic:
    """Convert ``diagnostic`` into the record published to the editor.

    Args:
        diagnostic: Normalized diagnostic produced by a parser or the analyzer.
        source: Optional label naming the tool that produced the diagnostic.

    Returns:
        HostDiagnostic: Record with a 0-indexed range, a display message built from
        the overview and ANSI-stripped details, and a mapped severity.
    """

    host_range = HostRange(
        start=_host_position(diagnostic.region.start),
        end=_host_position(diagnostic.region.end),
    )
    message = f"{diagnostic.overview}{_MESSAGE_SEPARATOR}{strip_ansi(diagnostic.details)}"
    return HostDiagnostic(
        range=host_range,
        message=message,
        severity=severity_from_label(diagnostic.type),
        source=source,
    )


__all__ = [
    "Diagnostic",
    "HostDiagnostic",
    "HostPosition",
    "HostRange",
    "Position",
    "Region",
    "strip_ansi",
    "synthetic_region",
    "to_host_diagnostic",
]
