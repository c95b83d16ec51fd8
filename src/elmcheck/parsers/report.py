# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Parser for the Elm 0.19 ``elm make --report json`` output."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Final

from ..errors import CompilerOutputError
from ..models import Diagnostic, synthetic_region
from ..severity import Severity
from .base import ParseContext, build_diagnostic, flatten_message, load_json_line

COMPILE_ERRORS: Final[str] = "compile-errors"
PROJECT_ERROR: Final[str] = "error"


def _sequence(value: object, *, field: str, line: str) -> Sequence[Any]:
    if value is None:
        return ()
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return value
    raise CompilerOutputError(f"Expected '{field}' to be a list", line=line)


def _mapping(value: object, *, field: str, line: str) -> Mapping[str, Any]:
    if isinstance(value, Mapping):
        return value
    raise CompilerOutputError(f"Expected '{field}' to be an object", line=line)


class JsonReportParser:
    """Turn newline-delimited JSON report documents into diagnostics.

    Each stderr line holds one document with a ``type`` discriminant:

    * ``compile-errors``: per-file groups, one diagnostic per problem.
    * ``error``: one whole-project diagnostic at a synthetic 1,1 region.

    Any other discriminant yields nothing so newer report kinds pass through.
    """

    def parse_line(self, line: str, context: ParseContext) -> list[Diagnostic]:
        if not line.strip():
            return []
        document = _mapping(load_json_line(line), field="document", line=line)
        kind = document.get("type")
        if kind == COMPILE_ERRORS:
            return self._compile_errors(document, line=line)
        if kind == PROJECT_ERROR:
            return [self._project_error(document, context, line=line)]
        return []

    def _compile_errors(self, document: Mapping[str, Any], *, line: str) -> list[Diagnostic]:
        diagnostics: list[Diagnostic] = []
        for raw_group in _sequence(document.get("errors"), field="errors", line=line):
            group = _mapping(raw_group, field="errors[]", line=line)
            path = group.get("path")
            for raw_problem in _sequence(group.get("problems"), field="problems", line=line):
                problem = _mapping(raw_problem, field="problems[]", line=line)
                payload = {
                    "tag": "error",
                    "overview": problem.get("title", ""),
                    "subregion": "",
                    "details": flatten_message(problem.get("message")),
                    "region": problem.get("region"),
                    "type": Severity.ERROR.value,
                    "file": path,
                }
                diagnostics.append(build_diagnostic(payload, line=line))
        return diagnostics

    @staticmethod
    def _project_error(document: Mapping[str, Any], context: ParseContext, *, line: str) -> Diagnostic:
        payload = {
            "tag": "error",
            "overview": document.get("title", ""),
            "subregion": "",
            "details": flatten_message(document.get("message")),
            "region": synthetic_region(),
            "type": Severity.ERROR.value,
            "file": document.get("path") or context.target_file,
        }
        return build_diagnostic(payload, line=line)


__all__ = ["COMPILE_ERRORS", "JsonReportParser", "PROJECT_ERROR"]
