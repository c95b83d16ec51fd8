# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Render published diagnostics for the terminal or as JSON."""

from __future__ import annotations

import json
from collections.abc import Mapping

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from .models import HostDiagnostic
from .severity import HostSeverity

PublishedCollections = Mapping[str, Mapping[str, tuple[HostDiagnostic, ...]]]

_SEVERITY_STYLE: dict[HostSeverity, str] = {
    HostSeverity.ERROR: "red",
    HostSeverity.WARNING: "yellow",
    HostSeverity.INFORMATION: "cyan",
    HostSeverity.HINT: "dim",
}


def count_errors(collections: PublishedCollections) -> int:
    """Return how many published records carry error severity."""

    return sum(
        1
        for entries in collections.values()
        for records in entries.values()
        for record in records
        if record.severity is HostSeverity.ERROR
    )


def render_diagnostics(collections: PublishedCollections, *, console: Console, color: bool) -> None:
    """Print one table per non-empty collection."""

    for name, entries in collections.items():
        if not entries:
            continue
        table = Table(title=name, box=box.SIMPLE_HEAVY if color else box.SIMPLE, expand=False)
        table.add_column("File", no_wrap=True)
        table.add_column("Line:Col", justify="right", no_wrap=True)
        table.add_column("Severity", no_wrap=True)
        table.add_column("Message")
        for location in sorted(entries):
            for record in entries[location]:
                # Ranges are 0-indexed; show them the way editors number lines.
                position = f"{record.range.start.line + 1}:{record.range.start.character + 1}"
                severity = record.severity.name.lower()
                style = _SEVERITY_STYLE[record.severity] if color else None
                table.add_row(location, position, Text(severity, style=style or ""), record.message)
        console.print(table)


def diagnostics_to_json(collections: PublishedCollections) -> str:
    """Serialise published collections as a JSON document."""

    payload = {
        name: {location: [record.model_dump(mode="json") for record in records] for location, records in entries.items()}
        for name, entries in collections.items()
    }
    return json.dumps(payload, indent=2, sort_keys=True)


__all__ = ["PublishedCollections", "count_errors", "diagnostics_to_json", "render_diagnostics"]
