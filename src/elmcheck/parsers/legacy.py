# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Parser for the Elm 0.18 ``elm-make --report json`` output."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Final

from ..errors import CompilerOutputError
from ..models import Diagnostic
from .base import ParseContext, build_diagnostic, load_json_line

SUCCESS_SENTINEL: Final[str] = "Successfully generated"


class LegacyReportParser:
    """Turn stdout lines holding JSON issue arrays into diagnostics.

    ``elm-make`` prints either a success banner or a single-line JSON array whose
    entries already carry the diagnostic field names, so entries are validated
    as-is.
    """

    def parse_line(self, line: str, context: ParseContext) -> list[Diagnostic]:
        if line.startswith(SUCCESS_SENTINEL) or not line.strip():
            return []
        payload = load_json_line(line)
        if not isinstance(payload, list):
            raise CompilerOutputError("Expected a JSON array of issues", line=line)
        diagnostics: list[Diagnostic] = []
        for entry in payload:
            if not isinstance(entry, Mapping):
                raise CompilerOutputError("Expected every issue to be a JSON object", line=line)
            record = dict(entry)
            record.setdefault("file", context.target_file)
            diagnostics.append(build_diagnostic(record, line=line))
        return diagnostics


__all__ = ["LegacyReportParser", "SUCCESS_SENTINEL"]
